from setuptools import setup, find_packages
import os

# Read the long description from README.md if it exists
long_description = ""
if os.path.isfile("README.md"):
    with open("README.md", "r", encoding="utf-8") as f:
        long_description = f.read()

setup(
    name='drift_sim',
    version='0.1.0',
    packages=find_packages(include=['drift_sim', 'drift_sim.*']),
    description='Inter-valley scattering and boundary interaction models for drifting charge carriers',
    long_description=long_description,
    long_description_content_type='text/markdown',
    license='GPLv3',
    keywords=['charge transport', 'Monte Carlo', 'semiconductor', 'crystal', 'detector'],

    # These are the runtime dependencies for your package:
    install_requires=[
        'numpy>=1.18.0',
        'scipy>=1.4.0',
        'numba>=0.50.0',
        'PyYAML>=5.1',
    ],
    extras_require={
        'test': ['pytest>=6.0'],
    },
    entry_points={
        'console_scripts': [
            'drift-sim=drift_sim.cli:main',
        ],
    },

    classifiers=[
        'Development Status :: 3 - Alpha',
        'Intended Audience :: Science/Research',
        'License :: OSI Approved :: GNU General Public License v3 (GPLv3)',
        'Programming Language :: Python :: 3',
        'Topic :: Scientific/Engineering :: Physics',
    ],

    python_requires='>=3.10',
    include_package_data=True,
    zip_safe=False,
)
