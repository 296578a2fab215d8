# config.py


class Config:
    PROD = False
    HEADLESS = True
    DOMAIN_KEY = "staging"
    RESULTS_FILE = "test_results.csv"


class StagingConfig(Config):
    pass


class ProductionConfig(Config):
    PROD = True
    DOMAIN_KEY = "production"


def get_profile(environ) -> type:
    """Pick the environment profile; `PROD=true` selects production."""
    if str(environ.get("PROD", "")).lower() == "true":
        return ProductionConfig
    return StagingConfig
