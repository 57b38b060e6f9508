"""Shell integration scripts printed by ``cmdwise init``"""

from importlib import resources

SUPPORTED_SHELLS = ("bash", "zsh")


def load_script(shell: str) -> str:
    """Return the integration script for ``shell`` (one of SUPPORTED_SHELLS)"""
    if shell not in SUPPORTED_SHELLS:
        raise ValueError(f"Unsupported shell: {shell}")
    return resources.files(__name__).joinpath(f"cmdwise.{shell}").read_text(encoding="utf-8")
