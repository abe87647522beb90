"""Entry point for ``python -m nova_calc``."""

from .cli import main


if __name__ == "__main__":
    main()
