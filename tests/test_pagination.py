import pytest

from juno.node.pagination import (
    PaginationError,
    get_height,
    sort_and_paginate,
    validate_page,
    validate_per_page,
    validate_skip_count,
)


def _results(positions):
    return [{"height": h, "index": i, "tx": bytes([h, i])} for h, i in positions]


@pytest.mark.parametrize("value", [None, 0, -5])
def test_per_page_defaults(value):
    assert validate_per_page(value) == 30


def test_per_page_clamped_to_max():
    assert validate_per_page(1000) == 100


def test_per_page_kept_in_range():
    assert validate_per_page(42) == 42


def test_page_none_is_first():
    assert validate_page(None, 10, 50) == 1


def test_page_within_range_kept():
    assert validate_page(5, 10, 50) == 5


def test_page_beyond_range_fails():
    with pytest.raises(PaginationError, match=r"page should be within \[1, 5\] range, given 6"):
        validate_page(6, 10, 50)


def test_page_zero_fails():
    with pytest.raises(PaginationError):
        validate_page(0, 10, 50)


def test_empty_results_have_one_page():
    assert validate_page(1, 10, 0) == 1
    with pytest.raises(PaginationError, match=r"\[1, 1\]"):
        validate_page(2, 10, 0)


def test_page_with_bad_per_page_fails():
    with pytest.raises(ValueError):
        validate_page(1, 0, 10)


def test_skip_count():
    assert validate_skip_count(1, 30) == 0
    assert validate_skip_count(3, 10) == 20
    assert validate_skip_count(0, 10) == 0


def test_get_height_none_is_latest():
    assert get_height(100, None, 1) == 100


def test_get_height_in_range():
    assert get_height(100, 50, 10) == 50


def test_get_height_not_positive():
    with pytest.raises(PaginationError, match="height must be greater than 0, but got 0"):
        get_height(100, 0, 1)


def test_get_height_above_latest():
    with pytest.raises(PaginationError, match="must be less than or equal"):
        get_height(100, 101, 1)


def test_get_height_below_base():
    with pytest.raises(PaginationError, match="height 5 is not available, lowest height is 10"):
        get_height(100, 5, 10)


def test_sort_ascending():
    out = sort_and_paginate(_results([(2, 1), (1, 3), (2, 0), (1, 1)]), None, None, "asc")
    positions = [(tx["height"], tx["index"]) for tx in out["txs"]]
    assert positions == sorted(positions)
    assert out["total_count"] == 4


def test_sort_empty_order_is_ascending():
    data = _results([(3, 0), (1, 0), (2, 0)])
    assert sort_and_paginate(data, None, None, "")["txs"] == sort_and_paginate(
        data, None, None, "asc"
    )["txs"]


def test_sort_descending():
    out = sort_and_paginate(_results([(2, 1), (1, 3), (2, 0), (1, 1)]), None, None, "desc")
    positions = [(tx["height"], tx["index"]) for tx in out["txs"]]
    assert positions == sorted(positions, reverse=True)


def test_bad_order_fails():
    with pytest.raises(PaginationError, match="order_by"):
        sort_and_paginate(_results([(1, 0)]), None, None, "random")


def test_pages_cover_all_results_once():
    data = _results([(h, 0) for h in range(1, 8)])
    seen = []
    for page in (1, 2, 3):
        out = sort_and_paginate(data, page, 3, "asc")
        assert len(out["txs"]) <= 3
        seen.extend(tx["height"] for tx in out["txs"])
    assert seen == list(range(1, 8))


def test_page_out_of_range_fails():
    with pytest.raises(PaginationError):
        sort_and_paginate(_results([(1, 0), (2, 0)]), 3, 1, "asc")


def test_empty_results():
    out = sort_and_paginate([], None, None, "asc")
    assert out == {"txs": [], "total_count": 0}


def test_result_keeps_tx_bytes_and_result():
    data = [{"height": 1, "index": 0, "tx": b"abc", "result": {"code": 0}}]
    tx = sort_and_paginate(data, None, None, "asc")["txs"][0]
    assert tx["tx"] == b"abc"
    assert tx["tx_result"] == {"code": 0}
    assert len(tx["hash"]) == 64
    assert tx["hash"] == tx["hash"].upper()


def test_base64_tx_decoded():
    data = [{"height": 1, "index": 0, "tx": "YWJj"}]
    raw_form = [{"height": 1, "index": 0, "tx": b"abc"}]
    assert (
        sort_and_paginate(data, None, None, "asc")["txs"]
        == sort_and_paginate(raw_form, None, None, "asc")["txs"]
    )