"""Actionable error catalog for checkoutdeployer."""

from typing import Dict

_ERROR_MESSAGES: Dict[str, Dict[str, str]] = {
    "credentials_missing": {
        "what": "Missing {path} file. A sample file was created for you.",
        "next": "Fill out the storefront WebDAV credentials in {path} and try again.",
    },
    "credentials_incomplete": {
        "what": "The {path} file is missing WebDAV credentials: {keys}.",
        "next": "Add the credentials to the file and try again.",
    },
    "build_failed": {
        "what": "Build failed. {reason}",
        "next": "Fix the build errors locally (`{command}`) and deploy again.",
    },
    "dist_not_found": {
        "what": "Build output directory not found: {path}",
        "next": "Check that the build writes to `--dist-dir` and that it contains a `static` folder.",
    },
    "upload_failed": {
        "what": "Upload of {name} to {dest} failed. {reason}",
        "next": "Check the WebDAV credentials and connectivity, then deploy again to a new folder.",
    },
}


def actionable_error(code: str, **kwargs: str) -> str:
    if code not in _ERROR_MESSAGES:
        raise KeyError(f"Unknown error catalog key: {code}")

    template = _ERROR_MESSAGES[code]
    what = template["what"].format(**kwargs)
    next_step = template["next"].format(**kwargs)
    return f"{what} Suggested action: {next_step}"
