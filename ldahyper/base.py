import numpy as np


class BaseTopicModel():
    """
    Attributes
    ----------
    n_doc: int
        the number of total documents in the corpus, 0 until a corpus is bound
    n_voca: int
        the vocabulary size of the corpus, 0 until a corpus is bound
    verbose: boolean
        if True, log each iteration step while inference.
    """
    def __init__(self, **kwargs):
        self.n_doc = 0
        self.n_voca = 0
        self.verbose = kwargs.pop('verbose', True)
        if kwargs:
            raise TypeError('Unknown model options: %s' % ', '.join(sorted(kwargs)))


class BaseGibbsParamTopicModel(BaseTopicModel):
    """ Base class of parametric topic models with collapsed Gibbs sampling inference

    Holds the sufficient statistics shared by every sampling step. The tables are
    allocated when a corpus is bound (`_allocate`), since their size depends on the vocabulary.

    Attributes
    ----------
    n_topic: int
        a number of topics to be inferred through the Gibbs sampling
    word_topic: ndarray, shape (n_voca, n_topic)
        type-topic matrix, keeps the number of assigned word tokens for each type-topic pair
    sum_T: ndarray, shape (n_topic)
        number of word tokens assigned for each topic
    doc_topic: ndarray, shape (n_topic)
        topic counts of the document currently being sampled
    alpha: ndarray, shape (n_topic)
        asymmetric parameter of Dirichlet prior for document-topic distribution
    alpha_sum: float
        sum of alpha
    beta: float
        symmetric parameter of Dirichlet prior for topic-word distribution
    beta_sum: float
        beta * n_voca
    topic_assignment: list of ndarray
        topic of every word token, one array per document
    """

    def __init__(self, n_topic, alpha_sum, beta, **kwargs):
        super(BaseGibbsParamTopicModel, self).__init__(**kwargs)
        if int(n_topic) != n_topic or n_topic < 1:
            raise ValueError('Number of topics must be a positive integer, got %r' % (n_topic,))
        if alpha_sum is None:
            alpha_sum = float(n_topic)
        if not (np.isfinite(alpha_sum) and alpha_sum > 0):
            raise ValueError('alpha_sum must be positive and finite, got %r' % (alpha_sum,))
        if not (np.isfinite(beta) and beta > 0):
            raise ValueError('beta must be positive and finite, got %r' % (beta,))

        self.n_topic = int(n_topic)
        self.alpha = np.full(self.n_topic, alpha_sum / self.n_topic)
        self.alpha_sum = float(alpha_sum)
        self.beta = float(beta)
        self.beta_sum = 0.

        self.word_topic = None
        self.sum_T = np.zeros(self.n_topic, dtype=np.intp)
        self.doc_topic = np.zeros(self.n_topic, dtype=np.intp)

        self.topic_assignment = list()

    def _allocate(self, n_doc, n_voca):
        self.n_doc = n_doc
        self.n_voca = n_voca
        self.beta_sum = self.beta * self.n_voca
        self.word_topic = np.zeros([self.n_voca, self.n_topic], dtype=np.intp)
        self.sum_T[:] = 0
        self.topic_assignment = list()

    def _add_assignment(self, doc, topics):
        """ add the tokens of one document with known topics to the count tables """
        np.add.at(self.word_topic, (doc, topics), 1)
        self.sum_T += np.bincount(topics, minlength=self.n_topic)

    def check_counts(self, docs):
        """ Verify the count tables against the topic assignment

        Raises
        ------
        AssertionError
            if `word_topic` or `sum_T` disagree with the assignment
        """
        expected = np.zeros_like(self.word_topic)
        for doc, topics in zip(docs, self.topic_assignment):
            np.add.at(expected, (doc, topics), 1)
        assert (expected == self.word_topic).all(), 'type-topic counts do not match the topic assignment'
        assert (self.word_topic.sum(0) == self.sum_T).all(), 'tokens per topic do not match the type-topic counts'
