from .corpus import Corpus
from .lda_hyper import GibbsLDAHyper, SamplingError
from .dirichlet import learn_parameters, log_gamma_stirling
from .histogram import TopicHistogram
