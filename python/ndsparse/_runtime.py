import os

_ENV_VAR = "NDSPARSE_CHECK"
_FALSY = ("0", "false", "no", "off")

_current_check = True


def set_check_invariants(flag: bool) -> None:
    global _current_check
    _current_check = bool(flag)
    os.environ[_ENV_VAR] = "1" if _current_check else "0"


def get_check_invariants() -> bool:
    # If user set env externally, honor it
    env = os.environ.get(_ENV_VAR)
    if env:
        return env.strip().lower() not in _FALSY
    return _current_check


def resolve_check(check) -> bool:
    """Return ``check`` as a bool, falling back to the process-wide default."""
    if check is None:
        return get_check_invariants()
    return bool(check)
