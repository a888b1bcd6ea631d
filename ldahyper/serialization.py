""" Checkpoint codec and text state dump of a sampled topic model

A checkpoint is a compressed numpy archive with these arrays:

    version      format version, currently 1
    n_topic      number of topics
    n_voca       vocabulary size
    alpha        document-topic prior, shape (n_topic)
    alpha_sum    sum of alpha
    beta         topic-word prior
    word_topic   type-topic counts, shape (n_voca, n_topic)
    sum_T        tokens per topic, shape (n_topic)
    doc_lengths  number of tokens of each document
    tokens       type ids of all documents, concatenated
    topics       topic of every token, aligned with tokens
    has_vocab    whether vocab holds the type labels
    vocab        type labels, empty when has_vocab is false
    has_labels   whether labels holds a class label per document
    labels       document class labels, empty when has_labels is false
    has_sources  whether sources holds a source name per document
    sources      document source names, '' for a missing one, empty when has_sources is false

The layout does not depend on how the model keeps its state in memory.
"""
import gzip

import numpy as np

CURRENT_VERSION = 1


def to_record(model):
    """ collect the arrays of a checkpoint from a model with a bound corpus """
    corpus = model.corpus
    doc_lengths = corpus.doc_lengths
    if corpus.n_tokens > 0:
        tokens = np.concatenate(corpus.docs)
        topics = np.concatenate(model.topic_assignment)
    else:
        tokens = np.zeros(0, dtype=np.intp)
        topics = np.zeros(0, dtype=np.intp)

    return {
        'version': CURRENT_VERSION,
        'n_topic': model.n_topic,
        'n_voca': model.n_voca,
        'alpha': model.alpha,
        'alpha_sum': model.alpha_sum,
        'beta': model.beta,
        'word_topic': model.word_topic,
        'sum_T': model.sum_T,
        'doc_lengths': doc_lengths,
        'tokens': tokens,
        'topics': topics,
        'has_vocab': corpus.vocab is not None,
        'vocab': np.array(corpus.vocab if corpus.vocab is not None else [], dtype=str),
        'has_labels': corpus.labels is not None,
        'labels': corpus.labels if corpus.labels is not None else np.zeros(0, dtype=np.intp),
        'has_sources': corpus.sources is not None,
        'sources': np.array([source or '' for source in corpus.sources] if corpus.sources is not None else [],
                            dtype=str),
    }


def write_record(record, path):
    # a file object keeps numpy from appending '.npz' to the path
    with open(path, 'wb') as f:
        np.savez_compressed(f, **record)


def read_record(path):
    """ Read a checkpoint into a dict of arrays

    Raises
    ------
    ValueError
        if the file was written with an unsupported format version
    """
    with np.load(path, allow_pickle=False) as data:
        record = dict((key, data[key]) for key in data.files)

    version = int(record.get('version', -1))
    if version != CURRENT_VERSION:
        raise ValueError('Unsupported checkpoint version %d in %s' % (version, path))
    return record


def write_state(corpus, topic_assignment, path):
    with gzip.open(path, 'wt') as out:
        out.write('#doc pos typeindex type topic\n')
        for di, (doc, topics) in enumerate(zip(corpus, topic_assignment)):
            for wi in range(len(doc)):
                out.write('%d %d %d %s %d\n' % (di, wi, doc[wi], corpus.word(doc[wi]), topics[wi]))
