"""Tests for job slugs and URL builders."""

import uuid

import pytest

from jobsearch.models import JobRecord
from jobsearch.slug import (
    company_slug,
    decode,
    encode,
    job_url,
    search_url,
    slug_segment,
)


def test_segment_strips_diacritics_and_punctuation():
    assert slug_segment("Café Développeur!") == "cafe-developpeur"
    assert slug_segment("  C++ / Rust   Engineer ") == "c-rust-engineer"
    assert slug_segment(None) == ""


def test_encode_full_slug():
    slug = encode("Senior Data Engineer", "Acme Corp.", "Pune, Maharashtra", "ABC123")
    assert slug == "senior-data-engineer-pune-at-acme-corp-abc123"


def test_encode_without_location():
    assert encode("Backend Engineer", "Acme", None, "42") == "backend-engineer-at-acme-42"
    assert encode("Backend Engineer", "Acme", "   ", "42") == "backend-engineer-at-acme-42"


def test_encode_is_deterministic():
    args = ("Data Analyst", "Initech", "Remote", "7")
    assert encode(*args) == encode(*args)


@pytest.mark.parametrize(
    "title,company,location",
    [
        ("Backend Engineer", "Acme", "Bengaluru, KA"),
        ("Ingénieur Logiciel", "Société Générale", ""),
        ("数据工程师", "公司", None),
        ("", "", ""),
        ("R&D — Lead (Remote)", "Foo-Bar Ltd", "New York, NY"),
    ],
)
def test_uuid_round_trip(title, company, location):
    job_id = str(uuid.uuid4())
    assert decode(encode(title, company, location, job_id)) == job_id


def test_decode_falls_back_to_last_token():
    assert decode("backend-engineer-at-acme-12345") == "12345"


def test_decode_bare_id_and_empty():
    assert decode("12345") == "12345"
    assert decode("") == ""
    assert decode("trailing-") == "trailing-"


def test_decode_truncates_hyphenated_non_uuid_ids():
    """Known limitation: only the last hyphen token survives."""
    slug = encode("Engineer", "Acme", None, "job-2024-17")
    assert decode(slug) == "17"


def test_company_slug():
    assert company_slug("Tata Consultancy Services", "TCS01") == "tata-consultancy-services-tcs01"


def test_job_url_prefers_precomputed_slug():
    job = JobRecord(id="9", title="Tester", company="Acme", slug="custom-slug-9")
    assert job_url(job) == "/jobs/custom-slug-9"

    job = JobRecord(id="9", title="Tester", company="Acme", location="Delhi")
    assert job_url(job) == "/jobs/tester-delhi-at-acme-9"


def test_search_url():
    assert search_url("python dev", "Pune") == "/search?q=python+dev&location=Pune"
    assert search_url("python", "") == "/search?q=python"
