from setuptools import setup, find_packages

setup(
    name="fastcc",
    version="0.1",
    description="Flux consistency checking (FASTCC) for the COBRApy framework",
    long_description=("Flux consistency checking for constraint-based metabolic models with the FASTCC algorithm. "
                      "Identifies blocked reactions with a small number of linear programs."),
    long_description_content_type="text/plain",
    license="Apache License 2.0",
    python_requires=">=3.7",
    packages=find_packages(exclude=["tests"]),
    install_requires=["cobra", "optlang", "swiglpk", "scipy", "numpy", "pandas"],
    extras_require={"test": ["pytest", "pytest-timeout"]},
    classifiers=[
        "Intended Audience :: Science/Research", "Development Status :: 3 - Alpha", "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10", "Programming Language :: Python :: 3.11", "Programming Language :: Python :: 3.12",
        "Natural Language :: English", "Operating System :: OS Independent", "Topic :: Scientific/Engineering :: Bio-Informatics"
    ],
    keywords=["metabolism", "constraint-based", "flux consistency", "blocked reactions"],
    zip_safe=False,
)
