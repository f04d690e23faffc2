"""Tests for projectpilot.ids module."""
import re
import time

from projectpilot.ids import generate_id

ID_PATTERN = re.compile(r"^id_(\d+)_([0-9a-z]{9})$")


def test_id_format():
    """Ids are a timestamp prefix plus a base-36 suffix."""
    assert ID_PATTERN.match(generate_id())


def test_id_prefix_is_current_millis():
    before = time.time_ns() // 1_000_000
    millis = int(ID_PATTERN.match(generate_id()).group(1))
    after = time.time_ns() // 1_000_000
    assert before <= millis <= after


def test_ids_do_not_collide_within_a_session():
    ids = {generate_id() for _ in range(2000)}
    assert len(ids) == 2000
