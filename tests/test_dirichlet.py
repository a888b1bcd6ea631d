import numpy as np
from scipy.special import gammaln

from ldahyper.dirichlet import learn_parameters, log_gamma_stirling


def _histograms(alpha, n_doc, doc_length, seed=0):
    random_state = np.random.RandomState(seed)
    topic_doc_counts = np.zeros([len(alpha), doc_length + 1], dtype=int)
    doc_length_counts = np.zeros(doc_length + 1, dtype=int)
    for _ in range(n_doc):
        counts = random_state.multinomial(doc_length, random_state.dirichlet(alpha))
        doc_length_counts[doc_length] += 1
        topic_doc_counts[np.arange(len(alpha)), counts] += 1
    return topic_doc_counts, doc_length_counts


def test_log_gamma_stirling_matches_gammaln():
    z = np.array([1e-3, 0.01, 0.5, 1., 1.5, 2., 3.7, 10., 123.4, 1e5])
    assert np.allclose(log_gamma_stirling(z), gammaln(z), rtol=0, atol=1e-5)


def test_log_gamma_stirling_scalar_and_matrix():
    value = log_gamma_stirling(0.25)
    assert isinstance(value, float)
    assert abs(value - gammaln(0.25)) < 1e-5

    z = np.array([[0.3, 4.], [12., 0.05]])
    result = log_gamma_stirling(z)
    assert result.shape == (2, 2)
    assert np.allclose(result, gammaln(z), atol=1e-5)
    # the argument is not modified
    assert z[0, 0] == 0.3


def test_learn_parameters_recovers_ordering():
    true_alpha = np.array([0.2, 0.5, 1.0])
    topic_doc_counts, doc_length_counts = _histograms(true_alpha, 500, 100)

    alpha = np.ones(3)
    alpha_sum = learn_parameters(alpha, topic_doc_counts, doc_length_counts)

    assert np.isclose(alpha_sum, alpha.sum())
    assert alpha[0] < alpha[1] < alpha[2]
    assert abs(alpha_sum - true_alpha.sum()) < 0.5 * true_alpha.sum()


def test_learn_parameters_is_stable_on_static_histogram():
    topic_doc_counts, doc_length_counts = _histograms(np.array([0.5, 0.5, 2.0, 1.0]), 200, 40, seed=3)

    alpha = np.ones(4)
    first = learn_parameters(alpha, topic_doc_counts, doc_length_counts)
    first_alpha = alpha.copy()
    second = learn_parameters(alpha, topic_doc_counts, doc_length_counts)

    assert abs(second - first) < 1e-4 * first
    assert np.allclose(alpha, first_alpha, rtol=1e-3)


def test_learn_parameters_concentrated_histogram():
    # ten documents of length 4, each with two tokens of each topic
    doc_length_counts = np.zeros(5, dtype=int)
    doc_length_counts[4] = 10
    topic_doc_counts = np.zeros([2, 5], dtype=int)
    topic_doc_counts[:, 2] = 10

    alpha = np.ones(2)
    sums = [learn_parameters(alpha, topic_doc_counts, doc_length_counts) for _ in range(3)]

    assert all(np.isfinite(s) and s > 0 for s in sums)
    assert np.isclose(alpha[0], alpha[1])
    assert abs(sums[2] - sums[1]) < 1e-3 * sums[1]


def test_learn_parameters_unused_topic_stays_positive():
    doc_length_counts = np.zeros(6, dtype=int)
    doc_length_counts[5] = 4
    topic_doc_counts = np.zeros([3, 6], dtype=int)
    topic_doc_counts[0, 5] = 2
    topic_doc_counts[0, 2] = 2
    topic_doc_counts[1, 0] = 2
    topic_doc_counts[1, 3] = 2
    topic_doc_counts[2, 0] = 4

    alpha = np.ones(3)
    alpha_sum = learn_parameters(alpha, topic_doc_counts, doc_length_counts)

    assert (alpha > 0).all()
    assert alpha[2] < 1e-3
    assert np.isclose(alpha_sum, alpha.sum())
