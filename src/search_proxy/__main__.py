"""Run the search proxy: ``python -m search_proxy``."""

from .app import main

if __name__ == "__main__":
    main()
