"""Shared fixtures for tinyscad tests."""

from pathlib import Path

import pytest

from tinyscad.templates import load_template

FIXTURES = Path(__file__).parent / "fixtures"


@pytest.fixture
def fixtures_dir():
    return FIXTURES


@pytest.fixture
def brick_path():
    return FIXTURES / "classic_brick.scad"


@pytest.fixture
def brick_template(brick_path):
    return load_template(brick_path)


@pytest.fixture
def plate_template():
    return load_template(FIXTURES / "classic_plate.scad")


@pytest.fixture
def unit_cube_scad():
    return "// @id unit_cube\n// @param w|Width|1|10|1|2\ncube([w, 1, 1]);\n"
