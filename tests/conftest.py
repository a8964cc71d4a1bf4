"""Shared test fixtures for the gnomad-lite schema validator."""

import copy
import os

import pytest

# Keep parser caches off so tmp files rewritten within a test are re-read.
os.environ.setdefault("GNOMAD_LITE_SCHEMA_CACHE_ENABLED", "false")

from gnomad_lite_schema.models.records import build_gnomad_validator  # noqa: E402


VALID_FREQUENCY = {
    "ac": 12,
    "an": 152000,
    "af": 7.894736842105263e-05,
    "flags": [],
    "filters": ["AC0"],
    "ancestry_groups": {
        "afr": {"ac": 10, "an": 41000, "af": 0.00024390243902439024},
        "nfe": {"ac": 2, "an": 68000, "af": 2.941176470588235e-05},
    },
}

VALID_VARIANT = {
    "variant_id": "1-55051215-G-A",
    "exome": copy.deepcopy(VALID_FREQUENCY),
    "genome": copy.deepcopy(VALID_FREQUENCY),
}

VALID_GENE = {
    "symbol": "PCSK9",
    "ensembl_id": "ENSG00000169174",
    "chrom": "1",
    "start": 55039548,
    "stop": 55064852,
    "flags": [],
    "filters": [],
    "fafmax95": 0.00012,
    "variant_ids": ["1-55051215-G-A", "1-234-A-C"],
}


@pytest.fixture(scope="session")
def gnomad_validator():
    """The bundled gnomad-lite schema compiled with its record rules."""
    return build_gnomad_validator()


@pytest.fixture
def valid_variant():
    return copy.deepcopy(VALID_VARIANT)


@pytest.fixture
def valid_gene():
    return copy.deepcopy(VALID_GENE)


@pytest.fixture
def container(valid_variant, valid_gene):
    return {"variants": [valid_variant], "genes": [valid_gene]}
