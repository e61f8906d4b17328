"""Allow `python -m krypto`."""
from .cli import main

if __name__ == "__main__":
    main()
