"""Walk every page of /users and /groups the way Opal does."""
import pytest


def _walk(client, sign, path, key):
    items, cursors, cursor = [], [], ""
    for _ in range(20):
        url = f"{path}?cursor={cursor}" if cursor else path
        resp = client.get(url, headers=sign())
        assert resp.status_code == 200
        payload = resp.get_json()
        items.extend(payload[key])
        cursor = payload["next_cursor"]
        cursors.append(cursor)
        if cursor == "":
            break
    return items, cursors


@pytest.mark.parametrize("page_count", [1, 3])
def test_walk_all_users(client, sign, fake_authentik, page_count):
    pages = [
        [{"pk": page * 10 + i, "email": f"u{page}{i}@example.com"} for i in range(2)]
        for page in range(page_count)
    ]
    fake_authentik.paginate("/core/users/", pages)

    users, cursors = _walk(client, sign, "/users", "users")

    assert [u["id"] for u in users] == [str(u["pk"]) for page in pages for u in page]
    assert cursors == [str(n) for n in range(2, page_count + 1)] + [""]
    assert [c.params["page"] for c in fake_authentik.calls] == list(range(1, page_count + 1))


def test_walk_all_groups(client, sign, fake_authentik):
    fake_authentik.paginate(
        "/core/groups/",
        [[{"pk": "g1", "name": "one"}], [{"pk": "g2", "name": "two"}]],
    )

    groups, cursors = _walk(client, sign, "/groups", "groups")

    assert groups == [{"id": "g1", "name": "one"}, {"id": "g2", "name": "two"}]
    assert cursors == ["2", ""]
    assert all(c.params["include_users"] == "false" for c in fake_authentik.calls)


def test_walk_empty_directory(client, sign, fake_authentik):
    fake_authentik.paginate("/core/users/", [])

    users, cursors = _walk(client, sign, "/users", "users")

    assert users == []
    assert cursors == [""]
