import numpy as np
import pytest

from ldahyper import Corpus


def make_separable_corpus(n_doc=20, doc_length=30, seed=0):
    """ even documents use types 0-4, odd documents types 5-9 """
    random_state = np.random.RandomState(seed)
    docs = list()
    for di in range(n_doc):
        words = np.arange(5) if di % 2 == 0 else np.arange(5, 10)
        docs.append(random_state.choice(words, doc_length))
    vocab = ['w%d' % t for t in range(10)]
    return Corpus(docs, n_voca=10, vocab=vocab, labels=[di % 2 for di in range(n_doc)])


@pytest.fixture
def separable_corpus():
    return make_separable_corpus()
