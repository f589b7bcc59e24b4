from receptionist.bot.presenter import TranscriptPresenter
from receptionist.models.conversation import ConversationStatus, Speaker


def test_partial_is_replaced_by_its_final():
    presenter = TranscriptPresenter()

    partial = presenter.append_partial(Speaker.AGENT, "Namaste! ")
    presenter.append_partial(Speaker.AGENT, "Kaise help karun?")
    final = presenter.finalize(Speaker.AGENT, "Namaste! Kaise help karun?")

    assert final.id == partial.id
    assert final.isFinal is True
    assert [entry.text for entry in presenter.entries] == ["Namaste! Kaise help karun?"]
    assert presenter.in_progress(Speaker.AGENT) is None


def test_partials_accumulate_until_final():
    presenter = TranscriptPresenter()

    presenter.append_partial(Speaker.AGENT, "Hello")
    presenter.append_partial(Speaker.AGENT, " there")

    current = presenter.in_progress(Speaker.AGENT)
    assert current.text == "Hello there"
    assert current.isFinal is False
    assert presenter.final_entries == []


def test_empty_final_falls_back_to_deltas():
    presenter = TranscriptPresenter()
    presenter.append_partial(Speaker.AGENT, "Sure, one moment")

    final = presenter.finalize(Speaker.AGENT, "")

    assert final.text == "Sure, one moment"


def test_empty_utterance_is_dropped():
    presenter = TranscriptPresenter()

    assert presenter.finalize(Speaker.USER, "   ") is None
    assert presenter.entries == []


def test_finals_keep_append_order_and_partials_come_last():
    presenter = TranscriptPresenter()

    presenter.finalize(Speaker.USER, "Haircut tomorrow?")
    presenter.append_partial(Speaker.AGENT, "Let me check")
    presenter.add_final(Speaker.USER, "Around 10 please")

    entries = presenter.entries
    assert [(e.speaker, e.text, e.isFinal) for e in entries] == [
        (Speaker.USER, "Haircut tomorrow?", True),
        (Speaker.USER, "Around 10 please", True),
        (Speaker.AGENT, "Let me check", False),
    ]


def test_partials_are_per_speaker():
    presenter = TranscriptPresenter()

    user = presenter.append_partial(Speaker.USER, "I want")
    agent = presenter.append_partial(Speaker.AGENT, "Ji")
    presenter.finalize(Speaker.USER, "I want a facial")

    assert user.id != agent.id
    assert presenter.in_progress(Speaker.AGENT).text == "Ji"
    assert presenter.final_entries[0].id == user.id


def test_transcript_callback_sees_every_update():
    seen = []
    presenter = TranscriptPresenter(on_transcript=seen.append)

    presenter.append_partial(Speaker.AGENT, "Hi")
    presenter.finalize(Speaker.AGENT, "Hi!")

    assert [(e.text, e.isFinal) for e in seen] == [("Hi", False), ("Hi!", True)]
    assert seen[0].id == seen[1].id


def test_audio_level_is_clamped_and_reported():
    levels = []
    presenter = TranscriptPresenter(on_audio_level=levels.append)

    presenter.set_audio_level(1.7)
    presenter.set_audio_level(-0.2)

    assert levels == [1.0, 0.0]


def test_snapshot():
    presenter = TranscriptPresenter()
    presenter.finalize(Speaker.USER, "Hello")
    presenter.append_partial(Speaker.AGENT, "Namaste")
    presenter.set_audio_level(0.4)

    view = presenter.snapshot(ConversationStatus.SPEAKING, muted=True)

    assert view.status == ConversationStatus.SPEAKING
    assert view.audioLevel == 0.4
    assert view.muted is True
    assert [e.text for e in view.final_entries] == ["Hello"]
    assert len(view.entries) == 2
