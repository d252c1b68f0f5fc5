"""
Entry point for running the package as a module.

Usage:
    python -m causal_playground --config scenarios/chain.yaml
"""

from .cli import main

if __name__ == "__main__":
    main()
