"""
Module entry point for running as: python -m order_converter
"""
from .main import main

if __name__ == '__main__':
    main()
