import time

import numpy as np
from scipy.special import logsumexp

from .base import BaseGibbsParamTopicModel
from .corpus import Corpus
from .dirichlet import learn_parameters, log_gamma_stirling
from .formatted_logger import formatted_logger
from .histogram import TopicHistogram
from .serialization import read_record, to_record, write_record, write_state
from .utils import get_top_words, sampling_dirichlet, sampling_from_dist

logger = formatted_logger('GibbsLDAHyper')

DEFAULT_BETA = 0.01


class SamplingError(RuntimeError):
    """ raised when the conditional topic distribution of a token is degenerate """


class GibbsLDAHyper(BaseGibbsParamTopicModel):
    """
    Latent dirichlet allocation with collapsed Gibbs sampling and an asymmetric
    document-topic prior re-estimated during sampling.

    Wallach, Hanna M, Mimno, David and McCallum, Andrew, 2009,
    Rethinking LDA: Why priors matter

    Attributes
    ----------
    corpus: Corpus
        training documents, bound by `initialize` or `fit`
    testing: Corpus
        held-out documents used for the empirical likelihood, optional
    histogram: TopicHistogram
        document length and document-topic count histograms for the alpha update
    random: RandomState
        source of every random draw of the model

    Keyword arguments
    -----------------
    n_iterations: int
        number of sampling iterations run by `estimate` (default 1000)
    burn_in: int
        no histogram is collected and alpha is not optimized until this iteration (default 200)
    save_sample_interval: int
        histograms are collected every this many iterations after burn in (default 10)
    optimize_interval: int
        alpha is re-estimated every this many iterations after burn in, 0 disables (default 50)
    show_topics_interval: int
        top words are logged every this many iterations, 0 disables (default 50)
    words_per_topic: int
        number of words logged per topic (default 5)
    save_state_interval: int
        a checkpoint is written every this many iterations, 0 disables (default 0)
    state_path: str
        checkpoint path prefix; the iteration number is appended
    heldout_samples: int
        number of samples of the empirical likelihood logged with the top words (default 100)
    seed: int
        random seed (default: unseeded)
    verbose: boolean
        if True, log each iteration step while inference.
    """

    def __init__(self, n_topic, alpha_sum=None, beta=DEFAULT_BETA, **kwargs):
        self.n_iterations = kwargs.pop('n_iterations', 1000)
        self.burn_in = kwargs.pop('burn_in', 200)
        self.save_sample_interval = kwargs.pop('save_sample_interval', 10)
        self.optimize_interval = kwargs.pop('optimize_interval', 50)
        self.show_topics_interval = kwargs.pop('show_topics_interval', 50)
        self.words_per_topic = kwargs.pop('words_per_topic', 5)
        self.save_state_interval = kwargs.pop('save_state_interval', 0)
        self.state_path = kwargs.pop('state_path', None)
        self.heldout_samples = kwargs.pop('heldout_samples', 100)
        self.seed = kwargs.pop('seed', None)
        super(GibbsLDAHyper, self).__init__(n_topic=n_topic, alpha_sum=alpha_sum, beta=beta, **kwargs)
        self._validate_config()

        self.random = np.random.RandomState(self.seed)
        self.corpus = None
        self.testing = None
        self.histogram = None

        if self.verbose:
            logger.info('LDA: %d topics', self.n_topic)

    def _validate_config(self):
        for name in ('n_iterations', 'burn_in', 'save_sample_interval', 'optimize_interval',
                     'show_topics_interval', 'words_per_topic', 'save_state_interval'):
            value = getattr(self, name)
            if int(value) != value or value < 0:
                raise ValueError('%s must be a non-negative integer, got %r' % (name, value))
        if self.heldout_samples < 1:
            raise ValueError('heldout_samples must be positive, got %r' % (self.heldout_samples,))
        if self.save_state_interval and not self.state_path:
            raise ValueError('save_state_interval requires a state_path')

    def _check_bound(self):
        if self.corpus is None:
            raise RuntimeError('No corpus bound to the model; call initialize or fit first')

    @property
    def topic_labels(self):
        return ['Topic %d' % ti for ti in range(self.n_topic)]

    def set_testing(self, testing):
        """ set held-out documents for the empirical likelihood """
        if not isinstance(testing, Corpus):
            testing = Corpus(testing, n_voca=self.n_voca or None)
        self.testing = testing

    def initialize(self, docs, topic_assignment=None):
        """ Bind a corpus and build the count tables

        Without `topic_assignment` every document is sampled once from the predictive
        distribution, starting from empty tables. Otherwise the given topics are copied.

        Parameters
        ----------
        docs: Corpus or list, size=n_doc
        topic_assignment: list, size=n_doc, optional
            topic of every token of every document
        """
        corpus = docs if isinstance(docs, Corpus) else Corpus(docs)

        if topic_assignment is not None:
            topic_assignment = [np.array(topics, dtype=np.intp).ravel() for topics in topic_assignment]
            if len(topic_assignment) != len(corpus):
                raise ValueError('Got topics for %d documents, corpus has %d' % (len(topic_assignment), len(corpus)))
            for di, (doc, topics) in enumerate(zip(corpus, topic_assignment)):
                if len(doc) != len(topics):
                    raise ValueError('Document %d has %d tokens but %d topics' % (di, len(doc), len(topics)))
                if len(topics) > 0 and (topics.min() < 0 or topics.max() >= self.n_topic):
                    raise ValueError('Document %d has topics outside [0, %d)' % (di, self.n_topic))

        self.corpus = corpus
        self._allocate(corpus.n_doc, corpus.n_voca)

        if topic_assignment is None:
            for doc in corpus:
                topics = np.zeros(len(doc), dtype=np.intp)
                self.topic_assignment.append(topics)
                self.sample_document(doc, topics, initializing=True)
        else:
            for doc, topics in zip(corpus, topic_assignment):
                self.topic_assignment.append(topics)
                self._add_assignment(doc, topics)

        self.histogram = TopicHistogram(self.n_topic, corpus.max_length)
        if self.verbose:
            logger.info('max tokens: %d', corpus.max_length)
            logger.info('total tokens: %d', corpus.n_tokens)

    def sample_document(self, doc, topics, record_histogram=False, initializing=False):
        """ Resample the topic of every token of one document

        Parameters
        ----------
        doc: ndarray
            type ids of the document
        topics: ndarray
            current topic of each token, updated in place
        record_histogram: boolean
            if True, add the final topic counts of the document to the histograms
        initializing: boolean
            if True, the tokens are not in the count tables yet and `topics` is ignored
        """
        doc_topic = self.doc_topic
        doc_topic[:] = 0
        if not initializing:
            doc_topic += np.bincount(topics, minlength=self.n_topic)

        for wi in range(len(doc)):
            word = doc[wi]

            if not initializing:
                old_topic = topics[wi]
                doc_topic[old_topic] -= 1
                self.word_topic[word, old_topic] -= 1
                self.sum_T[old_topic] -= 1

            # conditional probability of a topic of current word wi
            prob = (self.word_topic[word] + self.beta) / (self.sum_T + self.beta_sum) * (doc_topic + self.alpha)
            prob_sum = prob.sum()
            if not (np.isfinite(prob_sum) and prob_sum > 0):
                raise SamplingError('Degenerate topic weights for type %d: %r' % (word, prob))

            new_topic = sampling_from_dist(prob, self.random)

            topics[wi] = new_topic
            doc_topic[new_topic] += 1
            self.word_topic[word, new_topic] += 1
            self.sum_T[new_topic] += 1

        if record_histogram:
            self.histogram.record(len(doc), doc_topic)

    def fit(self, docs, max_iter=None, topic_assignment=None, callback=None):
        """ Gibbs sampling for LDA with hyperparameter optimization

        Parameters
        ----------
        docs: Corpus or list
        max_iter: int
            number of Gibbs sampling iterations (default: n_iterations)
        topic_assignment: list, optional
            initial topics, see `initialize`
        callback: callable, optional
            called as callback(model, iteration) after every iteration
        """
        self.initialize(docs, topic_assignment)
        self.estimate(max_iter, callback)
        return self

    def estimate(self, max_iter=None, callback=None):
        self._check_bound()
        if max_iter is None:
            max_iter = self.n_iterations

        start = time.time()
        for iteration in range(1, max_iter + 1):
            tic = time.time()

            if self.show_topics_interval and iteration % self.show_topics_interval == 0:
                self._show_topics(iteration)

            if self.save_state_interval and iteration % self.save_state_interval == 0:
                self._save_checkpoint(iteration)

            if iteration > self.burn_in and self.optimize_interval and iteration % self.optimize_interval == 0:
                self.optimize_alpha()

            record_histogram = iteration > self.burn_in and bool(self.save_sample_interval) \
                and iteration % self.save_sample_interval == 0
            for di in range(self.n_doc):
                self.sample_document(self.corpus[di], self.topic_assignment[di], record_histogram)

            if self.verbose and iteration % 10 == 0:
                logger.info('[ITER] %d,\telapsed time:%.2f,\tlog_likelihood:%.2f', iteration, time.time() - tic,
                            self.model_log_likelihood())
            else:
                logger.debug('[ITER] %d,\telapsed time:%.2f', iteration, time.time() - tic)

            if callback is not None:
                callback(self, iteration)

        if self.verbose:
            logger.info('Total time: %.2f seconds', time.time() - start)

    def optimize_alpha(self):
        """ Re-estimate alpha from the collected histograms, then clear them

        Returns
        -------
        alpha_sum: float
        """
        self._check_bound()
        if self.histogram.n_recorded == 0:
            logger.debug('No documents recorded since the last update, alpha unchanged')
            return self.alpha_sum

        self.alpha_sum = learn_parameters(self.alpha, self.histogram.topic_doc_counts,
                                          self.histogram.doc_length_counts)
        self.histogram.clear()
        if self.verbose:
            logger.info('[ALPHA] sum:%.5f', self.alpha_sum)
        return self.alpha_sum

    def _show_topics(self, iteration):
        logger.info('[TOPICS] %d\n%s', iteration, self.print_top_words(self.words_per_topic))
        if self.testing is not None:
            logger.info('[HELDOUT] %d,\tempirical_likelihood:%.2f', iteration,
                        self.empirical_likelihood(self.heldout_samples))

    def _save_checkpoint(self, iteration):
        path = '%s.%d' % (self.state_path, iteration)
        try:
            self.save(path)
        except (IOError, OSError) as e:
            logger.error('Could not write checkpoint %s: %s', path, e)

    def doc_topic_counts(self):
        """ number of tokens of each topic in each document, shape (n_doc, n_topic) """
        self._check_bound()
        counts = np.zeros([self.n_doc, self.n_topic], dtype=np.intp)
        for di, topics in enumerate(self.topic_assignment):
            counts[di] = np.bincount(topics, minlength=self.n_topic)
        return counts

    def model_log_likelihood(self):
        """
        Joint log likelihood of the words and topic assignments

        The likelihood of the model is a Dirichlet-multinomial for the topics in each
        document times a Dirichlet-multinomial for the words in each topic, which is

            Gamma(sum_i a_i) / Gamma(sum_i (a_i + N_i)) * prod_i Gamma(a_i + N_i) / Gamma(a_i)

        Terms with N_i = 0 cancel and are skipped.
        """
        self._check_bound()
        lg = log_gamma_stirling

        # documents
        doc_topic = self.doc_topic_counts()
        nz = doc_topic > 0
        topic_log_gammas = lg(self.alpha)
        ll = (lg(self.alpha + doc_topic) - topic_log_gammas)[nz].sum()
        ll -= lg(self.alpha_sum + self.corpus.doc_lengths).sum()
        ll += self.n_doc * lg(self.alpha_sum)

        # topics
        nz = self.word_topic > 0
        ll += lg(self.beta + self.word_topic[nz]).sum()
        ll -= lg(self.beta_sum + self.sum_T).sum()
        ll += self.n_topic * lg(self.beta_sum) - nz.sum() * lg(self.beta)

        return float(ll)

    def empirical_likelihood(self, n_samples, testing=None):
        """ Importance sampling estimate of the log likelihood of held-out documents

        Each sample draws a topic distribution from Dirichlet(alpha) and scores every
        held-out token under the word distribution it induces.

        Parameters
        ----------
        n_samples: int
            number of topic distributions drawn
        testing: Corpus or list, optional
            held-out documents (default: the documents given to `set_testing`)
        """
        self._check_bound()
        if testing is None:
            testing = self.testing
        if testing is None:
            raise ValueError('No held-out documents')
        if not isinstance(testing, Corpus):
            testing = Corpus(testing, n_voca=self.n_voca)
        if testing.n_voca > self.n_voca:
            raise ValueError('Held-out vocabulary size %d exceeds the model vocabulary %d'
                             % (testing.n_voca, self.n_voca))
        if n_samples < 1:
            raise ValueError('n_samples must be positive, got %r' % (n_samples,))

        likelihoods = np.zeros([len(testing), n_samples])
        topic_word = (self.word_topic + self.beta) / (self.sum_T + self.beta_sum)

        for sample in range(n_samples):
            theta = sampling_dirichlet(self.alpha, self.random)
            multinomial = np.log(np.dot(topic_word, theta))
            for di, doc in enumerate(testing):
                likelihoods[di, sample] = multinomial[doc].sum()

        return float((logsumexp(likelihoods, axis=1) - np.log(n_samples)).sum())

    def topic_label_mutual_information(self, labels=None):
        """ Mutual information, in bits, between token topics and document labels

        Parameters
        ----------
        labels: ndarray, optional
            integer label of each document (default: the corpus labels)
        """
        self._check_bound()
        if labels is None:
            labels = self.corpus.labels
        if labels is None:
            raise ValueError('Corpus has no document labels')
        labels = np.asarray(labels, dtype=np.intp)

        topic_label = np.zeros([self.n_topic, labels.max() + 1])
        for di, topics in enumerate(self.topic_assignment):
            topic_label[:, labels[di]] += np.bincount(topics, minlength=self.n_topic)
        total = topic_label.sum()
        if total == 0:
            return 0.

        def entropy(counts):
            p = counts[counts > 0] / total
            return -np.sum(p * np.log2(p))

        return float(entropy(topic_label.sum(1)) + entropy(topic_label.sum(0)) - entropy(topic_label.ravel()))

    def get_sorted_topic_words(self, topic):
        """ every type of the vocabulary as (type, count), most frequent in `topic` first """
        self._check_bound()
        return get_top_words(self.word_topic, topic, self.n_voca)

    def print_top_words(self, n_words, use_newlines=False):
        self._check_bound()
        lines = list()
        for ti in range(self.n_topic):
            top_words = get_top_words(self.word_topic, ti, n_words)
            if use_newlines:
                lines.append(self.topic_labels[ti])
                for word, cnt in top_words:
                    weight = float(cnt) / self.sum_T[ti] if self.sum_T[ti] > 0 else 0.
                    lines.append('%s\t%.5f' % (self.corpus.word(word), weight))
                lines.append('')
            else:
                lines.append('%d\t%.5f\t%s' % (ti, self.alpha[ti],
                                               ' '.join(self.corpus.word(word) for word, _ in top_words)))
        return '\n'.join(lines)

    def write_topic_words(self, path, n_words, use_newlines=False):
        with open(path, 'w') as f:
            f.write(self.print_top_words(n_words, use_newlines))
            f.write('\n')

    def document_topics(self, threshold=0.0, max_topics=-1):
        """ Topic proportions of every document

        Parameters
        ----------
        threshold: float
            only topics with proportion of at least this value are returned
        max_topics: int
            at most this many topics are returned per document, negative for no limit

        Returns
        -------
        doc_topics: list
            list of (topic, proportion) for each document, largest proportion first
        """
        if max_topics < 0 or max_topics > self.n_topic:
            max_topics = self.n_topic

        doc_topics = list()
        for di, counts in enumerate(self.doc_topic_counts()):
            length = counts.sum()
            topics = list()
            if length > 0:
                proportion = counts / float(length)
                for ti in np.argsort(-proportion, kind='stable')[:max_topics]:
                    if proportion[ti] < threshold:
                        break
                    topics.append((int(ti), float(proportion[ti])))
            doc_topics.append(topics)
        return doc_topics

    def write_document_topics(self, path, threshold=0.0, max_topics=-1):
        with open(path, 'w') as f:
            f.write('#doc source topic proportion ...\n')
            for di, topics in enumerate(self.document_topics(threshold, max_topics)):
                f.write('%d %s ' % (di, self.corpus.source(di)))
                f.write(''.join('%d %g ' % (ti, p) for ti, p in topics))
                f.write('\n')

    def write_state(self, path):
        """ write every token as `doc pos typeindex type topic` to a gzip text file """
        self._check_bound()
        write_state(self.corpus, self.topic_assignment, path)

    def save(self, path):
        """ write a versioned checkpoint of the corpus, hyperparameters and topic assignment """
        self._check_bound()
        write_record(to_record(self), path)

    @classmethod
    def load(cls, path, **kwargs):
        """ rebuild a model from a checkpoint written by `save`

        Keyword arguments are passed to the constructor (e.g. sampling schedule, seed).
        """
        record = read_record(path)
        model = cls(int(record['n_topic']), alpha_sum=float(record['alpha_sum']), beta=float(record['beta']),
                    **kwargs)
        vocab = list(record['vocab']) if record['has_vocab'] else None
        labels = record['labels'] if record['has_labels'] else None
        sources = [str(source) or None for source in record['sources']] if record['has_sources'] else None
        corpus = Corpus(np.split(record['tokens'], np.cumsum(record['doc_lengths'])[:-1]),
                        n_voca=int(record['n_voca']), vocab=vocab, labels=labels, sources=sources)
        model.initialize(corpus, np.split(record['topics'], np.cumsum(record['doc_lengths'])[:-1]))
        model.alpha[:] = record['alpha']

        if not (model.word_topic == record['word_topic']).all() or not (model.sum_T == record['sum_T']).all():
            raise ValueError('Checkpoint %s is inconsistent: counts do not match the topic assignment' % path)
        return model
