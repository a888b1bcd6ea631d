import numpy as np

from .utils import convert_cnt_to_list


class Corpus:
    """ Read-only store of tokenized documents

    Attributes
    ----------
    docs: list of ndarray
        type ids of each document, in token order
    n_voca: int
        the vocabulary size; every type id is in [0, n_voca)
    vocab: list, optional
        display label of each type id
    labels: ndarray, optional
        integer class label of each document, used for topic/label mutual information
    sources: list, optional
        name of each document (e.g. the file it came from)
    """

    def __init__(self, docs, n_voca=None, vocab=None, labels=None, sources=None):
        self.docs = [np.array(doc, dtype=np.intp).ravel() for doc in docs]
        if len(self.docs) == 0:
            raise ValueError('Corpus has no documents')

        max_type = max([doc.max() for doc in self.docs if len(doc) > 0] or [-1])
        min_type = min([doc.min() for doc in self.docs if len(doc) > 0] or [0])
        if n_voca is None:
            n_voca = len(vocab) if vocab is not None else max_type + 1
        if n_voca < 1:
            raise ValueError('Corpus has an empty vocabulary')
        if min_type < 0 or max_type >= n_voca:
            raise ValueError('Type ids must be in [0, %d), found [%d, %d]' % (n_voca, min_type, max_type))
        if vocab is not None and len(vocab) != n_voca:
            raise ValueError('Vocabulary has %d entries for %d types' % (len(vocab), n_voca))
        if labels is not None:
            labels = np.array(labels, dtype=np.intp)
            if len(labels) != len(self.docs):
                raise ValueError('Got %d labels for %d documents' % (len(labels), len(self.docs)))
        if sources is not None and len(sources) != len(self.docs):
            raise ValueError('Got %d sources for %d documents' % (len(sources), len(self.docs)))

        self.n_voca = int(n_voca)
        self.vocab = list(vocab) if vocab is not None else None
        self.labels = labels
        self.sources = list(sources) if sources is not None else None

    @classmethod
    def from_ids_cnt(cls, word_ids, word_cnt, **kwargs):
        """ Build a corpus from bag-of-words documents

        Parameters
        ----------
        word_ids: list
            list of list of word id for each document
        word_cnt: list
            list of list of word count for each document
        """
        return cls(convert_cnt_to_list(word_ids, word_cnt), **kwargs)

    def __len__(self):
        return len(self.docs)

    def __getitem__(self, di):
        return self.docs[di]

    def __iter__(self):
        return iter(self.docs)

    @property
    def n_doc(self):
        return len(self.docs)

    @property
    def doc_lengths(self):
        return np.array([len(doc) for doc in self.docs], dtype=np.intp)

    @property
    def max_length(self):
        return int(self.doc_lengths.max())

    @property
    def n_tokens(self):
        return int(self.doc_lengths.sum())

    def type_counts(self):
        """ number of tokens of each type, shape (n_voca) """
        if self.n_tokens == 0:
            return np.zeros(self.n_voca, dtype=np.intp)
        return np.bincount(np.concatenate(self.docs), minlength=self.n_voca)

    def word(self, type_id):
        """ display label of a type """
        if self.vocab is None:
            return str(type_id)
        return self.vocab[type_id]

    def source(self, di):
        if self.sources is None or self.sources[di] is None:
            return 'null-source'
        return self.sources[di]
