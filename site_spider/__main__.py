"""
Main entry point for the site_spider package.

Allows running the spider as: python -m site_spider
"""

from site_spider.cli import main

if __name__ == "__main__":
    main()
