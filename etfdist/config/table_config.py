"""Default configurations.

Convenience functions returning fresh configuration dictionaries for table
construction and for the validation harnesses.
"""


def get_default_table_config() -> dict:
    """Get the default settings for building ETF tables.

    Returns
    -------
    dict
        - 'width': number of random bits W drawn per attempt
        - 'n_bits': number of bits N of the table index
        - 'tol_factor': partition tolerance, as a multiple of the machine epsilon
        - 'relax': relaxation factor of Newton updates
        - 'max_iter': maximum number of Newton iterations
    """
    return {
        "width": 64,
        "n_bits": 7,
        "tol_factor": 1e4,
        "relax": 1.0,
        "max_iter": 100,
    }


def get_collision_config() -> dict:
    """Get the default settings of the collision test."""
    return {
        "distribution": "etf_normal",
        "distribution_params": {"width": 32, "n_bits": 7},
        "min_dim": 20,
        "max_dim": 24,
        "repeat": 10,
        "seed": 0,
    }


def get_timing_config() -> dict:
    """Get the default settings of the timing benchmark."""
    return {
        "distributions": {
            "etf_normal": {"width": 64, "n_bits": 7},
            "ziggurat_normal": {"width": 64},
        },
        "n_iter": 100_000,
        "n_runs": 5,
        "seed": 0,
    }
