# setup.py
from setuptools import setup, find_packages

setup(
    name='lighter',
    version='0.1.0',
    description='A retained-mode component engine that builds live nodes from props dicts.',
    long_description=open('README.md').read(),
    long_description_content_type='text/markdown',

    # Only the engine package; tests stay out of the distribution.
    packages=find_packages(include=['lighter', 'lighter.*']),

    install_requires=[
        'PySide6',
        'typer',
        'PyYAML',
    ],
    extras_require={
        'test': [
            'pytest',
        ],
    },

    # Creates an executable script named `lighter` that calls the `app`
    # object inside `lighter.cli`.
    entry_points={
        'console_scripts': [
            'lighter = lighter.cli:app',
        ],
    },

    classifiers=[
        'Programming Language :: Python :: 3',
        'Operating System :: OS Independent',
        'Intended Audience :: Developers',
        'Topic :: Software Development :: User Interfaces',
    ],
    python_requires='>=3.10',
)
