import pytest
import random
from anonqa.errors import ConflictFailed, NotFound
from anonqa.models.question import Question
from anonqa.models.role import AppRole
from anonqa.models.vote import Vote, VoteType, counter_delta
from anonqa.services import questions as question_service
from anonqa.services import users as user_service
from anonqa.services import votes as vote_service


@pytest.fixture
def question(db_session, make_user, identity_of):
    author = make_user(full_name="Author")
    return question_service.create_question(db_session, identity_of(author), "投票測試", "內容")


def _ledger_counts(db_session, question_id):
    up = db_session.query(Vote).filter(Vote.question_id == question_id, Vote.vote_type == VoteType.UP).count()
    down = db_session.query(Vote).filter(Vote.question_id == question_id, Vote.vote_type == VoteType.DOWN).count()
    return up, down


def _counters(db_session, question_id):
    q = db_session.get(Question, question_id)
    db_session.refresh(q)
    return q.upvotes, q.downvotes


def test_counter_delta():
    assert counter_delta(None, VoteType.UP) == (1, 0)
    assert counter_delta(VoteType.UP, VoteType.DOWN) == (-1, 1)
    assert counter_delta(VoteType.DOWN, None) == (0, -1)
    assert counter_delta(VoteType.UP, VoteType.UP) == (0, 0)


def test_cast_vote_updates_counters(db_session, question, make_user, identity_of):
    voters = [make_user() for _ in range(3)]
    vote_service.cast_vote(db_session, identity_of(voters[0]), question.id, VoteType.UP)
    vote_service.cast_vote(db_session, identity_of(voters[1]), question.id, VoteType.UP)
    result = vote_service.cast_vote(db_session, identity_of(voters[2]), question.id, VoteType.DOWN)

    assert (result.upvotes, result.downvotes) == (2, 1)
    assert result.vote.vote_type == VoteType.DOWN
    assert _counters(db_session, question.id) == _ledger_counts(db_session, question.id)


def test_second_vote_is_conflict(db_session, question, make_user, identity_of):
    voter = make_user()
    vote_service.cast_vote(db_session, identity_of(voter), question.id, VoteType.UP)
    with pytest.raises(ConflictFailed):
        vote_service.cast_vote(db_session, identity_of(voter), question.id, VoteType.DOWN)
    assert _counters(db_session, question.id) == (1, 0)


def test_change_vote_moves_one_count(db_session, question, make_user, identity_of):
    voter = make_user()
    vote_service.cast_vote(db_session, identity_of(voter), question.id, VoteType.UP)
    result = vote_service.change_vote(db_session, identity_of(voter), question.id, VoteType.DOWN)

    assert (result.upvotes, result.downvotes) == (0, 1)
    assert _ledger_counts(db_session, question.id) == (0, 1)


def test_change_to_same_type_is_noop(db_session, question, make_user, identity_of):
    voter = make_user()
    vote_service.cast_vote(db_session, identity_of(voter), question.id, VoteType.DOWN)
    result = vote_service.change_vote(db_session, identity_of(voter), question.id, VoteType.DOWN)
    assert (result.upvotes, result.downvotes) == (0, 1)


def test_change_without_vote_is_not_found(db_session, question, make_user, identity_of):
    with pytest.raises(NotFound):
        vote_service.change_vote(db_session, identity_of(make_user()), question.id, VoteType.UP)


def test_retract_vote(db_session, question, make_user, identity_of):
    voter = make_user()
    vote_service.cast_vote(db_session, identity_of(voter), question.id, VoteType.UP)
    result = vote_service.retract_vote(db_session, identity_of(voter), question.id)

    assert result.vote is None
    assert (result.upvotes, result.downvotes) == (0, 0)
    with pytest.raises(NotFound):
        vote_service.retract_vote(db_session, identity_of(voter), question.id)


def test_toggle_vote_sequence(db_session, question, make_user, identity_of):
    identity = identity_of(make_user())

    result = vote_service.toggle_vote(db_session, identity, question.id, VoteType.UP)
    assert (result.upvotes, result.downvotes) == (1, 0)
    # 改投反對
    result = vote_service.toggle_vote(db_session, identity, question.id, VoteType.DOWN)
    assert (result.upvotes, result.downvotes) == (0, 1)
    # 再投相同類型即撤回
    result = vote_service.toggle_vote(db_session, identity, question.id, VoteType.DOWN)
    assert (result.upvotes, result.downvotes) == (0, 0)
    assert result.vote is None


def test_vote_on_missing_question(db_session, make_user, identity_of):
    with pytest.raises(NotFound):
        vote_service.cast_vote(db_session, identity_of(make_user()), 9999, VoteType.UP)


def test_list_my_votes_only_returns_own(db_session, question, make_user, identity_of):
    me, other = make_user(), make_user()
    vote_service.cast_vote(db_session, identity_of(me), question.id, VoteType.UP)
    vote_service.cast_vote(db_session, identity_of(other), question.id, VoteType.DOWN)

    votes = vote_service.list_my_votes(db_session, identity_of(me))
    assert [v.user_id for v in votes] == [me.id]


def test_deleting_voter_adjusts_counters(db_session, question, make_user, identity_of):
    admin = make_user(roles=[AppRole.ADMIN])
    keep, leave = make_user(), make_user()
    vote_service.cast_vote(db_session, identity_of(keep), question.id, VoteType.UP)
    vote_service.cast_vote(db_session, identity_of(leave), question.id, VoteType.UP)

    user_service.delete_user(db_session, identity_of(admin), leave.id)

    assert _counters(db_session, question.id) == (1, 0)
    assert _ledger_counts(db_session, question.id) == (1, 0)


def test_deleting_question_removes_votes(db_session, question, make_user, identity_of):
    admin = make_user(roles=[AppRole.ADMIN])
    vote_service.cast_vote(db_session, identity_of(make_user()), question.id, VoteType.UP)

    question_service.delete_question(db_session, identity_of(admin), question.id)

    assert db_session.query(Vote).count() == 0


def test_counters_match_ledger_after_random_sequence(db_session, make_user, identity_of):
    rng = random.Random(20240130)
    author = make_user()
    questions = [
        question_service.create_question(db_session, identity_of(author), f"問題 {i}", "內容")
        for i in range(3)
    ]
    identities = [identity_of(make_user()) for _ in range(4)]

    for _ in range(60):
        identity = rng.choice(identities)
        question = rng.choice(questions)
        vote_service.toggle_vote(db_session, identity, question.id, rng.choice([VoteType.UP, VoteType.DOWN]))
        assert _counters(db_session, question.id) == _ledger_counts(db_session, question.id)

    for question in questions:
        assert _counters(db_session, question.id) == _ledger_counts(db_session, question.id)


def test_concurrent_change_uses_current_vote_type(db_session, other_session, question, make_user, identity_of):
    x, y = make_user(), make_user()
    vote_service.cast_vote(db_session, identity_of(x), question.id, VoteType.UP)
    vote_service.cast_vote(db_session, identity_of(y), question.id, VoteType.UP)

    # 另一個請求先讀到舊的投票
    stale = other_session.query(Vote).filter(Vote.user_id == x.id).first()
    assert stale.vote_type == VoteType.UP

    vote_service.change_vote(db_session, identity_of(x), question.id, VoteType.DOWN)
    result = vote_service.change_vote(other_session, identity_of(x), question.id, VoteType.DOWN)

    assert (result.upvotes, result.downvotes) == (1, 1)
    assert _counters(db_session, question.id) == _ledger_counts(db_session, question.id) == (1, 1)


def test_concurrent_toggle_uses_current_vote_type(db_session, other_session, question, make_user, identity_of):
    x = make_user()
    vote_service.cast_vote(db_session, identity_of(x), question.id, VoteType.UP)
    other_session.query(Vote).filter(Vote.user_id == x.id).first()

    vote_service.change_vote(db_session, identity_of(x), question.id, VoteType.DOWN)
    # 目前為反對票，切換為贊成應改票而不是撤回
    result = vote_service.toggle_vote(other_session, identity_of(x), question.id, VoteType.UP)

    assert result.vote.vote_type == VoteType.UP
    assert _counters(db_session, question.id) == _ledger_counts(db_session, question.id) == (1, 0)
