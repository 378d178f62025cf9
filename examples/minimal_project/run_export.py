import asyncio
import logging
from pathlib import Path

from csvexport import LocalHost, download, load_export_profile
from csvexport.config.resolution import configure_logging

ROWS = [
    {"first_name": "Ada", "last_name": "Lovelace", "active": True, "tags": ["math", "engines"]},
    {"first_name": "José", "last_name": None, "active": False},
]


def main() -> None:
    here = Path(__file__).resolve().parent
    profile = load_export_profile(here / "config/profile.yaml")
    logging.basicConfig(format="%(levelname)s %(name)s: %(message)s")
    configure_logging(profile_level=profile.log_level)

    text = profile.render(
        ROWS,
        formatters={"Status": lambda value, row: "Active" if value else "Inactive"},
    )
    print(text)

    host = LocalHost(downloads_dir=here / "out")
    ok = asyncio.run(download(text, profile.download_name, host=host))
    print("downloaded:", ok)


if __name__ == "__main__":
    main()
