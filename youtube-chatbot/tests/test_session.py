def test_track_counts_messages_per_author():
    from session import StreamSession

    session = StreamSession()
    first = session.track("alice", now=10.0)
    assert first.message_count == 1
    assert first.is_first_message
    assert first.first_seen == 10.0

    again = session.track("alice", now=20.0)
    assert again is first
    assert again.message_count == 2
    assert again.first_seen == 10.0
    assert not again.is_first_message


def test_reset_adopts_video_and_clears_users():
    from session import StreamSession

    session = StreamSession(video_id="old", live_chat_id="chat", page_token="tok", running=True)
    session.track("alice")

    session.reset("new", now=5.0)

    assert session.video_id == "new"
    assert session.live_chat_id is None
    assert session.page_token is None
    assert session.running is False
    assert session.started_at == 5.0
    assert session.users == {}


def test_clear_and_is_active():
    from session import StreamSession

    session = StreamSession(video_id="v", live_chat_id="chat", running=True)
    assert session.is_active

    session.clear()
    assert session.video_id is None
    assert not session.is_active
