"""package-coverage: scope llvm-cov exports to a package's own sources."""

__version__ = "0.1.0"
