# setup.py
from setuptools import setup, find_namespace_packages

setup(
    name="gitfs",
    version="0.1.0",
    description="Read-only filesystem over a remote git repository",
    packages=find_namespace_packages(where="src", include=["gitfs", "gitfs.*"]),
    package_dir={"": "src"},
    python_requires=">=3.8",
    install_requires=[
        "requests",
        "dulwich",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        'console_scripts': [
            'gitfs=gitfs.interface.cli.app:main',
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
    ],
)
