"""Entry point: python -m cc_brain <command>"""

from cc_brain.cli import main

if __name__ == "__main__":
    main()
