"""Allow ``python -m rails_ci_matrix``."""

from rails_ci_matrix.cli import main

if __name__ == "__main__":
    main()
