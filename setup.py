#package configuration file
#!/usr/bin/env python3
from setuptools import setup
setup(
    name='looseobj',
    version='1.0',
    description='Content-addressed loose object store reading legacy and packed encodings',
    packages=['looseobj'],
    python_requires='>=3.8',
    extras_require={
        'test': ['pytest']
    },
    entry_points={
        'console_scripts':[
            'looseobj=looseobj.cli:main'
        ]
    }
)
