"""Package entry point for ``python -m cire``.

WHY: Users run the tool as ``python -m cire source.py``. Python's ``-m``
flag looks for ``__main__.py`` inside the package and executes it.
"""

from cire.cli import main

if __name__ == "__main__":
    main()
