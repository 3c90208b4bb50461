from setuptools import setup, find_packages

install_requires = [
    # Core requirements
    "colorama>=0.4.6",
    "jsonschema>=4.19.0",
    "tomli>=2.0.1; python_version < '3.11'",

    # GUI requirements - Qt6 ecosystem
    "PyQt6>=6.5.0",
    "PyQt6-Qt6>=6.5.0",
    "PyQt6-sip>=13.5.0",
    "qasync>=0.27.1",
]

# Development dependencies
extras_require = {
    'dev': [
        'pytest>=7.4.0',
        'pytest-cov>=4.1.0',
        'black>=23.7.0',
        'isort>=5.12.0',
        'mypy>=1.4.1',
        'flake8>=6.1.0',
    ]
}

setup(
    name="devcap",
    version="1.0.0",
    license='GNU GPLv3',
    description="Menubar summary of recent git activity across local repositories",
    packages=find_packages(include=["devcap", "devcap.*"]),
    python_requires='>=3.9',
    install_requires=install_requires,
    extras_require=extras_require,
    entry_points={
        "console_scripts": [
            "devcap=devcap.main:run",
            "devcap_gui=devcap.gui.main:main"
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Programming Language :: Python :: 3.9",
        'License :: OSI Approved :: GNU General Public License v3 (GPLv3)',
        "Operating System :: OS Independent",
        "Environment :: X11 Applications :: Qt",
    ],
)
