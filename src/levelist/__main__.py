"""Entry point for 'python -m levelist' command."""

from levelist.cli import main

if __name__ == "__main__":
    main()
