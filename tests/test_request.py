import logging

import pytest

from imageproxy.exception import InvalidInput
from imageproxy.image_generation.size import DiscreteSizePolicy, RangeSizePolicy
from imageproxy.proxy.request import build_generation_request, coerce_int, parse_request_body

RANGE = RangeSizePolicy(minimum=64, maximum=2048)
SNAP = DiscreteSizePolicy(choices=(256, 512, 1024))


@pytest.mark.parametrize(
    ('body', 'expected'),
    [
        ({'prompt': 'cat'}, {'prompt': 'cat'}),
        ('{"prompt": "cat"}', {'prompt': 'cat'}),
        (b'{"prompt": "cat", "width": 256}', {'prompt': 'cat', 'width': 256}),
        (None, {}),
        (b'', {}),
        ('   ', {}),
    ],
)
def test_parse_request_body(body: object, expected: dict) -> None:
    assert parse_request_body(body) == expected


@pytest.mark.parametrize('body', ['{"prompt": ', b'\xff\xfe', '[1, 2, 3]', '"cat"', 42])
def test_parse_request_body_falls_back_to_empty(body: object, caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING, logger='imageproxy.proxy.request'):
        assert parse_request_body(body) == {}
    assert 'treating it as empty' in caplog.text


@pytest.mark.parametrize(
    ('value', 'expected'),
    [
        (512, 512),
        (512.9, 512),
        ('512', 512),
        (' 640px', 640),
        ('-5', -5),
        ('abc', None),
        (None, None),
        (True, None),
        (float('nan'), None),
        ([512], None),
    ],
)
def test_coerce_int(value: object, expected: object) -> None:
    assert coerce_int(value) == expected


def test_prompt_is_trimmed() -> None:
    request = build_generation_request({'prompt': '  a red fox  '}, RANGE)
    assert request.prompt == 'a red fox'


@pytest.mark.parametrize('prompt', [None, '', '   ', '\n\t'])
def test_missing_prompt(prompt: object) -> None:
    with pytest.raises(InvalidInput, match='Missing `prompt`'):
        build_generation_request({'prompt': prompt}, RANGE)


def test_default_dimensions() -> None:
    request = build_generation_request({'prompt': 'fox'}, RANGE)
    assert (request.width, request.height) == (512, 512)
    assert request.size == '512x512'


def test_non_numeric_dimensions_fall_back() -> None:
    request = build_generation_request({'prompt': 'fox', 'width': 'wide', 'height': 'tall'}, RANGE)
    assert (request.width, request.height) == (512, 512)


def test_height_derives_from_width() -> None:
    request = build_generation_request({'prompt': 'fox', 'width': 800}, RANGE)
    assert (request.width, request.height) == (800, 800)


def test_synonymous_fields() -> None:
    request = build_generation_request({'prompt': 'fox', 'w': '300', 'h': 200}, RANGE)
    assert (request.width, request.height) == (300, 200)

    request = build_generation_request({'prompt': 'fox', 'size': 128}, RANGE)
    assert (request.width, request.height) == (128, 128)


def test_size_pair_string() -> None:
    request = build_generation_request({'prompt': 'fox', 'size': '1024x768'}, RANGE)
    assert (request.width, request.height) == (1024, 768)


def test_explicit_fields_win_over_size() -> None:
    request = build_generation_request({'prompt': 'fox', 'width': 100, 'size': 900}, RANGE)
    assert (request.width, request.height) == (100, 900)


def test_dimensions_are_clamped() -> None:
    request = build_generation_request({'prompt': 'fox', 'width': 10, 'height': 99999}, RANGE)
    assert (request.width, request.height) == (64, 2048)


def test_dimensions_are_snapped() -> None:
    request = build_generation_request({'prompt': 'fox', 'width': 300}, SNAP)
    assert request.size == '256x256'


def test_extras_are_collected() -> None:
    body = {'prompt': 'fox', 'quality': 'high', 'style': None, 'unrelated': 1}
    request = build_generation_request(body, RANGE, extra_fields=('quality', 'style'))
    assert request.extras == {'quality': 'high'}
