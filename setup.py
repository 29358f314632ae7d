from setuptools import setup, find_packages

setup(
    name='pyAppliedRegression',
    version='0.1.0',
    package_dir={'': 'src'},
    packages=find_packages(where='src'),
    install_requires=['numpy', 'pandas', 'scipy', 'matplotlib', 'scikit-learn>=1.2', 'statsmodels', 'lmfit', 'tqdm'],
    extras_require={'test': ['pytest']},
)
