import pytest

import csvexport


def test_public_api_scenario_end_to_end(people_rules) -> None:
    text = csvexport.generate(
        [{"first_name": "Ada", "active": True}],
        {"first_name": "First Name", "active": "Status"},
        ["First Name", "Country", "Status"],
        people_rules,
    )
    assert text.splitlines() == ['"First Name","Country","Status"', '"Ada","USA","Active"']
    assert csvexport.escape('Hello "World"') == '"Hello ""World"""'


@pytest.mark.asyncio
async def test_public_download_through_local_host(tmp_path) -> None:
    host = csvexport.LocalHost(downloads_dir=tmp_path)
    assert await csvexport.download('"A"\n', "x.csv", host=host) is True
    assert (tmp_path / "x.csv").read_text(encoding="utf-8-sig") == '"A"\n'
