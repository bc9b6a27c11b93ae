from ajaxreplay import RequestIdentity, generate_key


def test_key_without_body():
    assert generate_key(RequestIdentity("GET", "/users")) == "ajaxreplayGET/users"


def test_key_with_body():
    identity = RequestIdentity("POST", "/items")

    assert generate_key(identity, "a=1") == "ajaxreplayPOST/itemsa=1"
    assert generate_key(identity, b"a=1") == "ajaxreplayPOST/itemsa=1"
    assert generate_key(identity, "") == generate_key(identity, None) == "ajaxreplayPOST/items"


def test_key_ignores_credentials():
    anonymous = RequestIdentity("GET", "/me")
    authenticated = RequestIdentity("GET", "/me", False, "user", "pw")

    assert generate_key(anonymous) == generate_key(authenticated)


def test_undecodable_bodies_stay_distinct():
    identity = RequestIdentity("POST", "/upload")

    first = generate_key(identity, b"\xff\x00")
    second = generate_key(identity, b"\xfe\x00")

    assert first != second
    assert first.startswith("ajaxreplayPOST/upload")
