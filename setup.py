# setup.py
from setuptools import setup, find_packages

setup(
    name="dirtreestate",
    version="1.0.0",
    description="Expansion and selection state for directory tree views, eager or lazily loaded",
    author="Enrique Paredes",
    author_email="eparedesbalen@gmail.com",
    package_dir={"": "src"},
    packages=find_packages("src"),  # Encuentra automáticamente la carpeta 'dirtreestate'
    package_data={
        "dirtreestate": ["interface/locales/*.json"],
    },
    python_requires=">=3.9",
    install_requires=[
        "customtkinter",  # Interfaz gráfica (dirtreestate-gui)
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        'console_scripts': [
            'dirtreestate=dirtreestate.interface.cli.app:main',
        ],
        'gui_scripts': [
            'dirtreestate-gui=dirtreestate.interface.gui.app:main',
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
    ],
)
