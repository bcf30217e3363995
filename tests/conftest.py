"""
Shared fixtures for catalog processing tests.
Creates isolated temporary directories with controlled catalogs, record-sets and asset files.
"""
import pytest
import tempfile
from pathlib import Path
from typing import Dict


SAMPLE_CATALOG = """<?xml version="1.0"?>
<mame build="0.260">
  <machine name="pacman" sourcefile="pacman/pacman.cpp">
    <description>Pac-Man (Midway)</description>
    <year>1980</year>
    <manufacturer>Namco (Midway license)</manufacturer>
    <driver status="good" emulation="good"/>
  </machine>
  <machine name="puckman" sourcefile="pacman/pacman.cpp" cloneof="pacman">
    <description>Puck Man (Japan set 1)</description>
    <year>1980</year>
    <manufacturer>Namco (Midway license)</manufacturer>
    <driver status="good" emulation="good"/>
  </machine>
  <machine name="sf2" sourcefile="capcom/cps1.cpp">
    <description>Street Fighter II:   The World Warrior</description>
    <year>1991</year>
    <manufacturer>Capcom</manufacturer>
    <driver status="good" emulation="good"/>
  </machine>
  <machine name="mystery" sourcefile="misc/mystery.cpp">
    <description>Mystery Game</description>
    <year>198?</year>
    <manufacturer>&lt;unknown&gt;</manufacturer>
    <driver status="preliminary" emulation="preliminary"/>
  </machine>
</mame>
"""


MANUFACTURER_CATALOG = """<?xml version="1.0"?>
<mame>
  <machine name="a"><description>A</description><manufacturer>Acme</manufacturer>
    <driver emulation="good"/></machine>
  <machine name="b" cloneof="a"><description>B</description><manufacturer>Acme</manufacturer>
    <driver emulation="good"/></machine>
  <machine name="c"><description>C</description><manufacturer>Bootleg Inc</manufacturer>
    <driver emulation="good"/></machine>
</mame>
"""


def write_machines(path: Path, pairs) -> Path:
    """Writes a Machines-shape record-set file from (name, description) pairs."""
    items = "".join(
        f"<Machine><MachineName>{n}</MachineName><Description>{d}</Description></Machine>"
        for n, d in pairs
    )
    path.write_text(f'<?xml version="1.0" encoding="utf-8"?><Machines>{items}</Machines>', encoding="utf-8")
    return path


def write_softwares(path: Path, pairs) -> Path:
    """Writes a Softwares-shape record-set file from (name, description) pairs."""
    items = "".join(
        f"<Software><SoftwareName>{n}</SoftwareName><Description>{d}</Description></Software>"
        for n, d in pairs
    )
    path.write_text(f'<?xml version="1.0" encoding="utf-8"?><Softwares>{items}</Softwares>', encoding="utf-8")
    return path


@pytest.fixture
def temp_dir():
    """Creates isolated temporary directory, auto-cleanup after test."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def sample_catalog(temp_dir) -> Path:
    path = temp_dir / "mame.xml"
    path.write_text(SAMPLE_CATALOG, encoding="utf-8")
    return path


@pytest.fixture
def manufacturer_catalog(temp_dir) -> Path:
    path = temp_dir / "acme.xml"
    path.write_text(MANUFACTURER_CATALOG, encoding="utf-8")
    return path


@pytest.fixture
def record_set_files(temp_dir) -> Dict[str, Path]:
    """
    - machines: Machines shape {M1: Desc1}
    - softwares: Softwares shape {S1: Desc2}
    """
    lists = temp_dir / "lists"
    lists.mkdir()
    return {
        "machines": write_machines(lists / "machines.xml", [("M1", "Desc1")]),
        "softwares": write_softwares(lists / "softwares.xml", [("S1", "Desc2")]),
    }


@pytest.fixture
def software_dir(temp_dir) -> Path:
    """Folder with two software lists and one non-XML file that must be ignored."""
    folder = temp_dir / "hash"
    folder.mkdir()
    (folder / "nes.xml").write_text(
        '<softwarelist name="nes">'
        '<software name="smb"><description>Super Mario Bros.</description></software>'
        '<software name="zelda"><description>The Legend of Zelda</description></software>'
        '</softwarelist>', encoding="utf-8")
    (folder / "snes.xml").write_text(
        '<softwarelist name="snes">'
        '<software name="smw"><description>Super Mario World</description></software>'
        '<software name="nodesc"/>'
        '</softwarelist>', encoding="utf-8")
    (folder / "readme.txt").write_text("not a list", encoding="utf-8")
    return folder
