from sockjet.broadcast import Broadcast


class FakeConn:
    def __init__(self, conn_id):
        self.id = conn_id
        self.emitted = []

    def emit(self, event, *args):
        self.emitted.append((event, args))


def test_name():
    assert Broadcast().name() == "local"


def test_join_and_count():
    bc = Broadcast()
    a, b = FakeConn("a"), FakeConn("b")
    bc.join("room", a)
    bc.join("room", b)
    bc.join("room", a)
    assert bc.count("room") == 2
    assert bc.count("missing") == 0


def test_leave_removes_empty_room():
    bc = Broadcast()
    a = FakeConn("a")
    bc.join("room", a)
    bc.leave("room", a)
    assert bc.count("room") == 0
    assert bc.all_rooms() == []
    bc.leave("missing", a)
    assert bc.all_rooms() == []


def test_leave_all():
    bc = Broadcast()
    a, b = FakeConn("a"), FakeConn("b")
    bc.join("one", a)
    bc.join("two", a)
    bc.join("two", b)
    bc.leave_all(a)
    assert bc.rooms(a) == []
    assert bc.all_rooms() == ["two"]
    assert bc.count("two") == 1


def test_clear():
    bc = Broadcast()
    bc.join("room", FakeConn("a"))
    bc.join("other", FakeConn("b"))
    bc.clear("room")
    assert bc.all_rooms() == ["other"]


def test_send_reaches_only_room_members():
    bc = Broadcast()
    a, b = FakeConn("a"), FakeConn("b")
    bc.join("room", a)
    bc.join("other", b)
    bc.send("room", "reply", "hi", 1)
    assert a.emitted == [("reply", ("hi", 1))]
    assert b.emitted == []


def test_send_all():
    bc = Broadcast()
    a, b = FakeConn("a"), FakeConn("b")
    bc.join("room", a)
    bc.join("other", b)
    bc.send_all("notice", "msg")
    assert a.emitted == [("notice", ("msg",))]
    assert b.emitted == [("notice", ("msg",))]


def test_for_each():
    bc = Broadcast()
    a, b = FakeConn("a"), FakeConn("b")
    bc.join("room", a)
    bc.join("room", b)
    seen = []
    bc.for_each("room", lambda c: seen.append(c.id))
    assert sorted(seen) == ["a", "b"]
    missing = []
    bc.for_each("missing", missing.append)
    assert missing == []


def test_rooms():
    bc = Broadcast()
    a, b = FakeConn("a"), FakeConn("b")
    bc.join("one", a)
    bc.join("two", a)
    bc.join("two", b)
    assert sorted(bc.rooms(a)) == ["one", "two"]
    assert bc.rooms(b) == ["two"]
    assert sorted(bc.rooms()) == ["one", "two"]
    assert sorted(bc.all_rooms()) == ["one", "two"]