from setuptools import setup, find_packages

setup(
    name="smartcrawl",
    version="1.0.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "playwright>=1.40.0",
        "rich",
        "beautifulsoup4>=4.12.0",
        "dataclasses-json>=0.6.0",
        "python-dotenv>=1.0.0",
        # Learning component
        "scikit-learn>=1.3.0",
        "numpy>=1.24.0",
        "joblib>=1.3.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0.0",
            "pytest-asyncio",
        ],
    },
    entry_points={
        "console_scripts": [
            "smartcrawl=smartcrawl.main:main",
        ],
    },
    python_requires=">=3.9",
    author="Webisoft",
    author_email="info@webisoft.com",
    description="Element inventory crawler with outcome-driven action recommendations",
    long_description=open("README.md").read(),
    long_description_content_type="text/markdown",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
    ],
)
