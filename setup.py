from setuptools import setup, find_packages

with open("requirements.txt", "r") as f:
    requirements = f.read().splitlines()

setup(
    name="wp_dbsync",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    include_package_data=True,
    install_requires=requirements,
    extras_require={
        "test": ["pytest>=7.0"],
    },
    entry_points={
        'console_scripts': [
            'wp-dbsync=wp_dbsync.cli:main',
        ],
    },
    description="Pull remote WordPress databases into local environments with rewritten site URLs",
    keywords="wordpress, multisite, database, sync, search-replace",
    python_requires=">=3.8",
)
