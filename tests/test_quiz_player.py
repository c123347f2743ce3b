import itertools

from pdf_assistant.frontend import quiz_player


def test_starts_on_first_question_with_blank_answers(sample_quiz):
    state = quiz_player.start(sample_quiz)

    assert state.index == 0
    assert state.answers == ("", "", "")
    assert not state.finished


def test_selecting_overwrites_only_the_current_answer(sample_quiz):
    state = quiz_player.start(sample_quiz)
    state = quiz_player.select_answer(state, "Heat")
    state = quiz_player.select_answer(state, "Chemical energy")

    assert state.answers == ("Chemical energy", "", "")


def test_next_keeps_previous_answers_and_stops_at_last(sample_quiz):
    state = quiz_player.start(sample_quiz)
    state = quiz_player.select_answer(state, "Heat")
    state = quiz_player.next_question(state)
    state = quiz_player.next_question(state)
    state = quiz_player.next_question(state)

    assert state.index == 2
    assert state.answers[0] == "Heat"
    assert quiz_player.is_last_question(state)


def test_finish_only_from_last_question(sample_quiz):
    state = quiz_player.start(sample_quiz)
    assert quiz_player.finish(state) == state

    state = quiz_player.next_question(quiz_player.next_question(state))
    assert quiz_player.finish(state).finished


def test_finished_is_terminal(sample_quiz):
    state = quiz_player.start(sample_quiz)
    state = quiz_player.next_question(quiz_player.next_question(state))
    state = quiz_player.finish(state)

    assert quiz_player.select_answer(state, "anything") == state
    assert quiz_player.next_question(state) == state
    assert quiz_player.finish(state) == state


def test_score_is_case_insensitive(sample_quiz):
    state = quiz_player.QuizPlayerState(
        index=2, answers=("chemical ENERGY", "true", "chlorophyl"), finished=True
    )

    assert quiz_player.score(sample_quiz, state) == 2
    results = quiz_player.results(sample_quiz, state)
    assert [r.is_correct for r in results] == [True, True, False]
    assert results[2].correct_answer == "Chlorophyll"
    assert results[0].number == 1


def test_score_counts_matches_for_every_answer_combination(sample_quiz):
    pools = [("Chemical energy", "Heat", ""), ("True", "False"), ("chlorophyll", "")]
    for answers in itertools.product(*pools):
        state = quiz_player.QuizPlayerState(index=2, answers=answers, finished=True)
        expected = sum(
            q.answer.lower() == a.lower() for q, a in zip(sample_quiz.quiz, answers)
        )
        score = quiz_player.score(sample_quiz, state)
        assert score == expected
        assert 0 <= score <= len(sample_quiz.quiz)


def test_choices_per_question_type(sample_quiz):
    mcq, tf, short = sample_quiz.quiz

    assert quiz_player.choices_for(mcq) == ("Heat", "Chemical energy", "Sound")
    assert quiz_player.choices_for(tf) == ("True", "False")
    assert quiz_player.choices_for(short) == ()


def test_progress(sample_quiz):
    state = quiz_player.start(sample_quiz)
    assert quiz_player.progress(state) == 1 / 3
    assert quiz_player.progress(quiz_player.next_question(state)) == 2 / 3
