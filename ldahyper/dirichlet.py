import numpy as np

HALF_LOG_TWO_PI = 0.5 * np.log(2 * np.pi)

default_shape = 1.00001
default_scale = 1.0
max_iter = 200


def log_gamma_stirling(z):
    """ Log of the gamma function with Stirling's approximation

    Arguments below 2 are shifted up with the recurrence Gamma(z + 1) = z Gamma(z)
    before the series is applied. Absolute error is below 1e-5 for z > 0.

    Parameters
    ----------
    z: float or ndarray
        positive argument(s)
    """
    scalar = np.ndim(z) == 0
    z = np.array(z, dtype=float, ndmin=1)
    shift = np.zeros(z.shape)

    small = z < 2
    while np.any(small):
        shift[small] += np.log(z[small])
        z[small] += 1
        small = z < 2

    result = HALF_LOG_TWO_PI + (z - 0.5) * np.log(z) - z + \
        1. / (12 * z) - 1. / (360 * z ** 3) + 1. / (1260 * z ** 5)
    result -= shift

    if scalar:
        return float(result[0])
    return result


def learn_parameters(alpha, topic_doc_counts, doc_length_counts, shape=default_shape, scale=default_scale,
                     n_iter=max_iter):
    """Fixed point update of an asymmetric Dirichlet prior from histogram statistics.

    Minka's fixed point iteration for the MAP estimate of a Dirichlet-multinomial
    parameter under a Gamma(shape, scale) prior on each component,

        alpha_k <- (alpha_k * sum_n C_k(n) D(n, alpha_k) + shape - 1) / (sum_n C(n) D(n, alpha_sum) + 1 / scale)

    where D(n, a) = psi(a + n) - psi(a) = sum_{i=1..n} 1 / (a + i - 1) is computed as a running
    harmonic sum over the histogram.

    Parameters
    ----------
    alpha: ndarray, shape (n_topic)
        current parameter, updated in place
    topic_doc_counts: ndarray, shape (n_topic, max_len + 1)
        topic_doc_counts[k, n] = number of documents with exactly n tokens of topic k
    doc_length_counts: ndarray, shape (max_len + 1)
        doc_length_counts[n] = number of documents of length n
    shape, scale: float
        parameters of the Gamma prior
    n_iter: int
        number of fixed point iterations

    Returns
    -------
    alpha_sum: float
        sum of the updated parameter
    """
    topic_doc_counts = np.asarray(topic_doc_counts)
    doc_length_counts = np.asarray(doc_length_counts)
    alpha_sum = alpha.sum()

    # the histograms are mostly empty at the high end
    non_zero_limits = np.full(len(alpha), -1, dtype=int)
    for k in range(len(alpha)):
        nz = np.flatnonzero(topic_doc_counts[k])
        if len(nz) > 0:
            non_zero_limits[k] = nz[-1]

    lengths = np.arange(1, len(doc_length_counts))
    for iteration in range(n_iter):
        current_digamma = np.cumsum(1. / (alpha_sum + lengths - 1))
        denominator = np.dot(doc_length_counts[1:], current_digamma) + 1. / scale

        for k in range(len(alpha)):
            limit = non_zero_limits[k]
            old_alpha_k = alpha[k]
            current_digamma = np.cumsum(1. / (old_alpha_k + np.arange(limit)))
            alpha[k] = (old_alpha_k * np.dot(topic_doc_counts[k, 1:limit + 1], current_digamma) + shape - 1) \
                / denominator
        alpha_sum = alpha.sum()

    if not np.all(np.isfinite(alpha)) or np.any(alpha <= 0):
        raise ValueError('Dirichlet parameter left the positive orthant: %r' % (alpha,))
    return float(alpha_sum)
