import numpy as np
import pytest

from recserve import (
    Dataset,
    EmptyTrainingSetError,
    Mode,
    Recommender,
    RecommenderOptions,
)
from recserve.offline import UNKNOWN_INDEX

# users u1, u2 / items a, b, c, d in first-seen order
TRAIN = [("u1", "a", 5.0), ("u2", "b", 3.0), ("u2", "c", 4.0), ("u2", "d", 1.0)]
U = [[1, 0], [0, 1]]
V = [[3, 0], [1, 0], [1, 0], [0, 2]]
OPTS = RecommenderOptions(factors=2)


@pytest.fixture
def rec(fixed_trainer):
    return Recommender.fit_explicit(TRAIN, options=OPTS, trainer=fixed_trainer(U, V))


def ids(recs):
    return [r.id for r in recs]


def assert_non_increasing(recs):
    scores = [r.score for r in recs]
    assert scores == sorted(scores, reverse=True)


class TestFit:
    def test_hands_indexed_triples_to_trainer(self, fixed_trainer):
        trainer = fixed_trainer(U, V)
        Recommender.fit_explicit(TRAIN, options=OPTS, trainer=trainer)

        call, = trainer.calls
        assert (call["n_users"], call["n_items"]) == (2, 4)
        assert call["mode"] is Mode.EXPLICIT
        assert call["valid"] is None
        assert call["verbose"] is False
        np.testing.assert_array_equal(call["train"].user_indices, [0, 1, 1, 1])
        np.testing.assert_array_equal(call["train"].item_indices, [0, 1, 2, 3])
        np.testing.assert_allclose(call["train"].labels, [5, 3, 4, 1])

    def test_validation_ids_not_added_to_maps(self, fixed_trainer):
        trainer = fixed_trainer(U, V)
        valid = [("u1", "b", 2.0), ("u9", "a", 4.0), ("u2", "zz", 1.0)]
        rec = Recommender.fit_explicit(TRAIN, valid, options=OPTS, trainer=trainer)

        call, = trainer.calls
        np.testing.assert_array_equal(call["valid"].user_indices, [0, UNKNOWN_INDEX, 1])
        np.testing.assert_array_equal(call["valid"].item_indices, [1, 0, UNKNOWN_INDEX])
        assert len(call["valid"].known()) == 1
        # verbose=None is inferred from the presence of a validation set
        assert call["verbose"] is True
        assert rec.user_ids() == ["u1", "u2"]
        assert rec.item_ids() == ["a", "b", "c", "d"]

    def test_explicit_verbose_wins(self, fixed_trainer):
        trainer = fixed_trainer(U, V)
        opts = RecommenderOptions(factors=2, verbose=False)
        Recommender.fit_explicit(TRAIN, TRAIN, options=opts, trainer=trainer)
        assert trainer.calls[0]["verbose"] is False

    def test_global_mean(self, rec, fixed_trainer):
        assert rec.global_mean() == pytest.approx(3.25)
        implicit = Recommender.fit_implicit(TRAIN, options=OPTS, trainer=fixed_trainer(U, V))
        assert implicit.global_mean() == 0.0

    def test_empty_training_set(self, fixed_trainer):
        trainer = fixed_trainer(U, V)
        with pytest.raises(EmptyTrainingSetError, match="No training data"):
            Recommender.fit_explicit(Dataset(), trainer=trainer)
        assert trainer.calls == []

    def test_empty_training_set_is_value_error(self):
        with pytest.raises(ValueError):
            Recommender.fit_implicit([])

    def test_trainer_returning_wrong_shape(self, fixed_trainer):
        with pytest.raises(ValueError):
            Recommender.fit_explicit(TRAIN, options=OPTS, trainer=fixed_trainer(U, V[:3]))

    def test_pairs_default_to_one(self, fixed_trainer):
        trainer = fixed_trainer([[1.0]], [[1.0], [1.0]])
        rec = Recommender.fit_explicit([(1, "x"), (1, "y")],
                                       options=RecommenderOptions(factors=1), trainer=trainer)
        np.testing.assert_allclose(trainer.calls[0]["train"].labels, [1.0, 1.0])
        assert rec.global_mean() == 1.0


class TestPredict:
    def test_dot_product(self, rec):
        assert rec.predict("u1", "a") == pytest.approx(3.0)
        assert rec.predict("u2", "d") == pytest.approx(2.0)

    def test_cold_start_returns_global_mean(self, rec):
        assert rec.predict("nobody", "a") == rec.global_mean()
        assert rec.predict("u1", "nothing") == rec.global_mean()
        assert rec.predict("nobody", "nothing") == rec.global_mean()


class TestUserRecs:
    def test_excludes_rated_and_breaks_ties_by_index(self, rec):
        recs = rec.user_recs("u1", 2)
        assert ids(recs) == ["b", "c"]
        assert [r.score for r in recs] == pytest.approx([1.0, 1.0])

    def test_returns_remaining_catalogue(self, rec):
        recs = rec.user_recs("u1", 10)
        assert ids(recs) == ["b", "c", "d"]
        assert_non_increasing(recs)

    def test_short_result_when_catalogue_exhausted(self, rec):
        assert ids(rec.user_recs("u2", 5)) == ["a"]

    def test_unknown_user(self, rec):
        assert rec.user_recs("nobody", 5) == []

    def test_non_positive_count(self, rec):
        assert rec.user_recs("u1", 0) == []
        assert rec.user_recs("u1", -3) == []

    def test_scores_are_python_floats(self, rec):
        assert all(type(r.score) is float for r in rec.user_recs("u1", 3))


class TestSimilar:
    def test_item_recs_cosine(self, rec):
        recs = rec.item_recs("a", 10)
        assert ids(recs) == ["b", "c", "d"]
        assert [r.score for r in recs] == pytest.approx([1.0, 1.0, 0.0])

    def test_item_recs_never_returns_query(self, rec):
        for item_id in rec.item_ids():
            recs = rec.item_recs(item_id, 10)
            assert item_id not in ids(recs)
            assert len(recs) == 3
            assert_non_increasing(recs)

    def test_similar_users(self, rec):
        recs = rec.similar_users("u1", 5)
        assert ids(recs) == ["u2"]
        assert recs[0].score == pytest.approx(0.0)

    def test_unknown_key(self, rec):
        assert rec.item_recs("nothing", 5) == []
        assert rec.similar_users("nobody", 5) == []

    def test_zero_rows_use_epsilon(self, fixed_trainer):
        train = [("x", "i", 1.0), ("y", "i", 1.0), ("z", "i", 1.0)]
        trainer = fixed_trainer([[1, 0], [0, 0], [2, 0]], [[1, 1]])
        rec = Recommender.fit_explicit(train, options=OPTS, trainer=trainer)

        recs = rec.similar_users("x", 5)
        assert ids(recs) == ["z", "y"]
        assert [r.score for r in recs] == pytest.approx([1.0, 0.0])

        recs = rec.similar_users("y", 5)
        assert ids(recs) == ["x", "z"]
        assert all(np.isfinite(r.score) for r in recs)


class TestAccessors:
    def test_factors_are_copies(self, rec):
        f = rec.user_factors("u1")
        np.testing.assert_array_equal(f, [1, 0])
        f[0] = 42
        np.testing.assert_array_equal(rec.user_factors("u1"), [1, 0])
        np.testing.assert_array_equal(rec.item_factors("d"), [0, 2])

    def test_unknown_factors_are_none(self, fixed_trainer):
        rec = Recommender.fit_explicit(TRAIN, options=OPTS, trainer=fixed_trainer([[0, 0], [0, 0]], V))
        # a real all-zero row is still distinguishable from an unknown id
        np.testing.assert_array_equal(rec.user_factors("u1"), [0, 0])
        assert rec.user_factors("nobody") is None
        assert rec.item_factors("nothing") is None

    def test_ids_in_index_order(self, rec):
        assert rec.user_ids() == ["u1", "u2"]
        assert rec.item_ids() == ["a", "b", "c", "d"]


class TestWithTrainers:
    def test_rated_items_excluded(self, rated_data):
        rec = Recommender.fit_explicit(rated_data)
        assert set(ids(rec.user_recs(1, 5))) == {"E", "F"}
        assert set(ids(rec.user_recs(2, 5))) == {"A", "B"}

    def test_item_recs_same_score(self):
        data = Dataset()
        data.add(1, "A")
        data.add(1, "B")
        data.add(2, "C")
        rec = Recommender.fit_implicit(data, options=RecommenderOptions(random_state=0))

        recs = rec.item_recs("A", 5)
        assert sorted(ids(recs)) == ["B", "C"]
        assert all(np.isfinite(r.score) for r in recs)
        assert rec.global_mean() == 0.0

    def test_ids(self):
        data = [(1, "A", 1.0), (1, "B", 1.0), (2, "B", 1.0)]
        rec = Recommender.fit_explicit(data)
        assert rec.user_ids() == [1, 2]
        assert rec.item_ids() == ["A", "B"]

    def test_factors(self):
        data = [(1, "A", 1.0), (1, "B", 1.0), (2, "B", 1.0)]
        rec = Recommender.fit_explicit(data, options=RecommenderOptions(factors=20))
        assert len(rec.user_factors(1)) == 20
        assert len(rec.item_factors("A")) == 20
        assert rec.user_factors(3) is None
        assert rec.item_factors("C") is None

    def test_new_user(self):
        rec = Recommender.fit_explicit([(1, 1, 5.0), (2, 1, 3.0)])
        assert rec.user_recs(1000, 5) == []
        assert rec.predict(1000, 1) == pytest.approx(4.0)
        assert rec.predict(1, 1000) == rec.global_mean()

    def test_count_larger_than_catalogue(self, rated_data):
        rec = Recommender.fit_implicit(rated_data, options=RecommenderOptions(random_state=1))
        assert len(rec.item_recs("A", 100)) == 5
        assert len(rec.similar_users(1, 100)) == 1

    def test_validation_set(self):
        rng = np.random.default_rng(7)
        data = Dataset()
        for u in range(30):
            for i in rng.choice(20, size=8, replace=False):
                data.add(u, f"item{i}", float(rng.integers(1, 6)))
        train, valid = data.split_random(0.8, random_state=7)
        valid.add(999, "item0", 3.0)

        rec = Recommender.fit_explicit(
            train, valid, options=RecommenderOptions(factors=4, iterations=5, verbose=False)
        )
        assert 999 not in rec.user_ids()
        assert np.isfinite(rec.predict(0, "item0"))
