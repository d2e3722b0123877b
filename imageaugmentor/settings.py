import ast
from contextlib import suppress
from os import getenv


def get_env(name: str, default=None, *, required=True, is_list=False):
    value = getenv(name, default)

    if value is None and required:
        raise ValueError(f"Environment variable {name} is not set and has no default value")

    with suppress(Exception):
        value = ast.literal_eval(value)

    if is_list and isinstance(value, str):
        value = [item.strip() for item in value.split(",") if item.strip()]

    return value


# 0 means the seed is derived from the current time
DEFAULT_SEED = int(get_env("AUGMENTOR_SEED", "0"))
DEFAULT_QUALITY = int(get_env("AUGMENTOR_QUALITY", "95"))
DEFAULT_EXTENSIONS = tuple(get_env("AUGMENTOR_EXTENSIONS", ".jpg,.jpeg,.png", is_list=True))
OUTPUT_PREFIX = get_env("AUGMENTOR_OUTPUT_PREFIX", "output_")
OUTPUT_SUFFIX = get_env("AUGMENTOR_OUTPUT_SUFFIX", ".jpg")
