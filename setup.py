from setuptools import setup, find_namespace_packages

setup(
    name='atmfjstc-qt-window-state',
    version='0.1.0',

    author_email='atmfjstc@protonmail.com',

    package_dir={'': 'src'},
    packages=find_namespace_packages(where='src', include=['atmfjstc.*']),

    install_requires=[
        'termcolor>=1.1',
        'colorama>=0.4.6',
    ],

    entry_points={
        'console_scripts': [
            'qt-window-state=atmfjstc.lib.qt_window_state.cli:main',
        ],
    },

    zip_safe=True,

    description="Decoder for Qt window state blobs and QSettings INI files",

    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Environment :: Console",
        "Topic :: Software Development :: Debuggers",
        "Typing :: Typed",
    ],
    python_requires='>=3.7',
)
