"""Package setup for site_spider."""

from setuptools import setup, find_packages

setup(
    name="site-spider",
    version="1.0.0",
    description="Headless-browser spider that archives a web site and reports its links",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.10",
    install_requires=[
        "requests>=2.31.0",
        "beautifulsoup4>=4.12.0",
        "lxml>=5.0.0",
        "urllib3>=2.0.0",
        "playwright>=1.40.0",
        "Pillow>=10.0.0",
        "tqdm>=4.66.0",
        "colorlog>=6.8.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.4.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "site-spider=site_spider.cli:main",
        ],
    },
)
