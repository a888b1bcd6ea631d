import numpy as np


class TopicHistogram:
    """ Document/topic count histograms for Dirichlet hyperparameter estimation

    Attributes
    ----------
    doc_length_counts: ndarray, shape (max_len + 1)
        number of recorded documents of each length
    topic_doc_counts: ndarray, shape (n_topic, max_len + 1)
        topic_doc_counts[k, n] = number of recorded documents with exactly n tokens of topic k
    """

    def __init__(self, n_topic, max_len):
        self.doc_length_counts = np.zeros(max_len + 1, dtype=np.intp)
        self.topic_doc_counts = np.zeros([n_topic, max_len + 1], dtype=np.intp)
        self._topics = np.arange(n_topic)

    def record(self, doc_length, doc_topic):
        """ add one document with per-topic token counts `doc_topic` """
        self.doc_length_counts[doc_length] += 1
        self.topic_doc_counts[self._topics, doc_topic] += 1

    def clear(self):
        self.doc_length_counts[:] = 0
        self.topic_doc_counts[:] = 0

    @property
    def n_recorded(self):
        return int(self.doc_length_counts.sum())
