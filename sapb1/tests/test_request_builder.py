import json

from sapb1.http.request import DEFAULT_BOUNDARY, RequestBuilder


def test_json_request_sets_content_type_and_exact_length():
    d = RequestBuilder("https://b1.example/b1s/v1/Items").set_method("POST").set_body({"k": 1}).build()

    assert d.method == "POST"
    assert d.body == b'{"k":1}'
    assert d.headers["Content-Type"] == "application/json"
    assert d.headers["Content-Length"] == str(len(d.body))


def test_json_body_roundtrips_through_decoder():
    d = RequestBuilder("https://b1.example").set_body({"k": 1}).build()
    assert json.loads(d.body.decode("utf-8")) == {"k": 1}


def test_non_ascii_payload_length_counts_bytes():
    d = RequestBuilder("https://b1.example").set_body({"ItemName": "Café"}).build()

    assert "Café".encode("utf-8") in d.body
    assert d.headers["Content-Length"] == str(len(d.body))
    assert len(d.body) > len(d.body.decode("utf-8"))


def test_none_payload_means_empty_body():
    d = RequestBuilder("https://b1.example").set_body(None).build()

    assert d.body == b""
    assert d.headers["Content-Length"] == "0"
    assert d.headers["Content-Type"] == "application/json"
    assert d.method == "GET"


def test_cookie_header_preserves_iteration_order():
    d = RequestBuilder("https://b1.example").set_cookies({"a": "1", "b": "x y"}).build()
    assert d.headers["Cookie"] == "a=1;b=x y;"


def test_no_cookie_header_without_cookies():
    d = RequestBuilder("https://b1.example").build()
    assert "Cookie" not in d.headers


def test_header_block_follows_mapping_order():
    d = (
        RequestBuilder("https://b1.example")
        .set_headers({"Prefer": "odata.maxpagesize=50", "B1S-CaseInsensitive": "true"})
        .set_cookies({"B1SESSION": "abc"})
        .build()
    )

    assert list(d.headers) == [
        "Prefer",
        "B1S-CaseInsensitive",
        "Content-Type",
        "Content-Length",
        "Cookie",
    ]
    assert d.header_block == (
        "Prefer: odata.maxpagesize=50\r\n"
        "B1S-CaseInsensitive: true\r\n"
        "Content-Type: application/json\r\n"
        "Content-Length: 0\r\n"
        "Cookie: B1SESSION=abc;\r\n"
    )


def test_managed_headers_replace_caller_headers_in_place():
    d = (
        RequestBuilder("https://b1.example")
        .set_headers({"content-type": "text/plain", "X-A": "1", "Content-Length": "999"})
        .set_body([1, 2])
        .build()
    )

    assert list(d.headers) == ["Content-Type", "X-A", "Content-Length"]
    assert d.headers["Content-Type"] == "application/json"
    assert d.headers["Content-Length"] == "5"
    assert d.header_block.count("Content-Type:") == 1


def test_builder_is_immutable_and_chainable():
    base = RequestBuilder("https://b1.example")
    post = base.set_method("POST").set_body({"a": 1})

    assert base.method == "GET"
    assert base.payload is None
    assert post.method == "POST"
    assert base.build().body == b""
    assert post.build().body == b'{"a":1}'


def test_builder_copies_caller_mappings():
    headers = {"X-A": "1"}
    b = RequestBuilder("https://b1.example").set_headers(headers)
    headers["X-B"] = "2"

    assert dict(b.headers) == {"X-A": "1"}


def test_any_method_string_is_accepted():
    d = RequestBuilder("https://b1.example").set_method("PATCH").build()
    assert d.method == "PATCH"


def test_tls_options_are_passed_through():
    opts = {"verify_peer": False, "cafile": "/etc/ssl/b1.pem"}
    d = RequestBuilder("https://b1.example", tls_options=opts).build()

    assert dict(d.tls_options) == opts
    assert d.url == "https://b1.example"


def test_default_boundary_token():
    assert DEFAULT_BOUNDARY == "WebKitFormBoundaryUmZoXOtOBNCTLyxT"


def test_managed_headers_collapse_case_variants():
    d = (
        RequestBuilder("https://b1.example")
        .set_headers(
            {
                "content-length": "1",
                "Content-Length": "999",
                "X-A": "1",
                "content-type": "a/b",
                "Content-Type": "text/xml",
            }
        )
        .set_body({"k": 1})
        .build()
    )

    assert dict(d.headers) == {"Content-Length": "7", "X-A": "1", "Content-Type": "application/json"}
    assert d.header_block.lower().count("content-length:") == 1
    assert d.header_block.lower().count("content-type:") == 1


def test_cookie_header_case_variants_are_replaced():
    d = (
        RequestBuilder("https://b1.example")
        .set_headers({"cookie": "old=1;", "COOKIE": "old=2;"})
        .set_cookies({"B1SESSION": "abc"})
        .build()
    )

    assert d.headers["Cookie"] == "B1SESSION=abc;"
    assert [k for k in d.headers if k.lower() == "cookie"] == ["Cookie"]


def test_payload_changes_after_set_body_do_not_leak():
    payload = {"k": 1, "lines": [{"ItemCode": "A1"}]}
    b = RequestBuilder("https://b1.example").set_body(payload)
    payload["k"] = 2
    payload["lines"][0]["ItemCode"] = "B2"

    assert b.build().body == b'{"k":1,"lines":[{"ItemCode":"A1"}]}'
    assert b.payload == {"k": 1, "lines": [{"ItemCode": "A1"}]}
