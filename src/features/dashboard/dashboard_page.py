from functools import cache
from pathlib import Path

from util.config import config

TEMPLATE_PATH = Path(__file__).parent / "dashboard.html"


@cache
def __load_template() -> str:
    return TEMPLATE_PATH.read_text(encoding = "utf-8")


def render_dashboard() -> str:
    return __load_template().replace("{{version}}", config.version)
