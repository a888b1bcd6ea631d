import numpy as np
from scipy.special import logsumexp


def sampling_from_dist(prob, random_state=None):
    """ Sample index from an unnormalised probability distribution

    A uniform value is drawn from [0, prob.sum()) and the first index whose cumulative
    weight exceeds it is returned, so zero-weight entries are never chosen and ties
    go to the lower index.

    Parameters
    ----------
    prob: ndarray
        array of non-negative unnormalised weights
    random_state: RandomState, optional
        source of randomness (default: the global numpy generator)

    Returns
    -------
    new_topic: return a sampled index
    """
    if random_state is None:
        random_state = np.random
    c_sum = np.cumsum(prob)
    thr = c_sum[-1] * random_state.random_sample()
    return min(int(np.searchsorted(c_sum, thr, side='right')), len(c_sum) - 1)


def convert_cnt_to_list(word_ids, word_cnt):
    """ Expand bag-of-words documents (ids, counts) into token lists """
    corpus = list()

    for di in range(len(word_ids)):
        doc = list()
        doc_ids = word_ids[di]
        doc_cnt = word_cnt[di]
        for wi in range(len(doc_ids)):
            word_id = doc_ids[wi]
            for si in range(doc_cnt[wi]):
                doc.append(word_id)
        corpus.append(doc)
    return corpus


def get_top_words(word_topic, topic, n_words=20):
    """ Return (type, count) pairs of the `n_words` most frequent types of `topic`

    Types are ordered by count, descending; equal counts keep ascending type order.

    Parameters
    ----------
    word_topic: ndarray, shape (n_voca, n_topic)
        type-topic count table
    topic: int
    n_words: int
    """
    counts = word_topic[:, topic]
    order = np.argsort(-counts, kind='stable')[:n_words]
    return [(int(t), int(counts[t])) for t in order]


def sampling_dirichlet(alpha, random_state=None):
    """ Draw a distribution from Dirichlet(alpha) without underflow for small alpha

    Each Gamma(a) draw is taken in log space as log Gamma(a + 1) + log(U) / a,
    so components stay comparable even when every a is far below 1.

    Parameters
    ----------
    alpha: ndarray
        positive Dirichlet parameter
    random_state: RandomState, optional
        source of randomness (default: the global numpy generator)
    """
    if random_state is None:
        random_state = np.random
    log_gamma = np.log(random_state.gamma(alpha + 1)) + np.log(random_state.random_sample(len(alpha))) / alpha
    return np.exp(log_gamma - logsumexp(log_gamma))
