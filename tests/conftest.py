import pytest

FRONT_TEXT = """DRIVER LICENSE
DL C549417
EXP 01/13/2030
1 DOE JOHN ALLEN
123 MAIN ST
SACRAMENTO, CA 95822
DOB 01/13/1976
ISS 01/13/2022
SEX M HGT 5'-09" WGT 185 lb
EYES BLU HAIR BRN
CLASS C RSTR NONE
DONOR VETERAN
"""

ANSI_PAYLOAD = """@
ANSI 636014040002DL00410278ZC03190024DLDAQC549417
DCSDOE
DACJOHN
DADALLEN
DBB01131976
DBA01132030
DBD01132022
DBC1
DAU069 in
DAW185
DAYBLU
DAG123 MAIN ST
DAISACRAMENTO
DAJCA
DAK958220000
DCDC
"""


@pytest.fixture
def front_text():
    return FRONT_TEXT


@pytest.fixture
def ansi_payload():
    return ANSI_PAYLOAD
