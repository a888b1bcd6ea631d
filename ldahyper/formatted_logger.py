import logging
import os

_levels = {
    'debug': logging.DEBUG,
    'info': logging.INFO,
    'warn': logging.WARN,
    'error': logging.ERROR,
    'critical': logging.CRITICAL,
}


def formatted_logger(label, level=None, format=None, date_format=None, file_path=None):
    """ Return the logger `label` with a formatted stream handler attached

    Handlers are attached only once per label, so calling this again with the same label
    (e.g. when a module is re-imported) does not duplicate log lines.

    Parameters
    ----------
    label: str
        name of the logger
    level: str, optional
        one of 'debug', 'info', 'warn', 'error', 'critical' (default: info)
    file_path: str, optional
        if given, log lines are also appended to this file
    """
    log = logging.getLogger(label)
    if level is None:
        level = logging.INFO
    else:
        level = _levels[level.lower()]
    log.setLevel(level)

    if format is None:
        format = '%(asctime)s %(levelname)s:%(name)s:%(message)s'
    if date_format is None:
        date_format = '%Y-%m-%d %H:%M:%S'
    formatter = logging.Formatter(format, date_format)

    if not any(isinstance(h, logging.StreamHandler) and not isinstance(h, logging.FileHandler)
               for h in log.handlers):
        stream_handler = logging.StreamHandler()
        stream_handler.setFormatter(formatter)
        log.addHandler(stream_handler)

    if file_path is not None:
        file_path = os.path.abspath(file_path)
        if not any(isinstance(h, logging.FileHandler) and h.baseFilename == file_path for h in log.handlers):
            dir_name = os.path.dirname(file_path)
            if not os.path.exists(dir_name):
                os.makedirs(dir_name)
            file_handler = logging.FileHandler(file_path)
            file_handler.setFormatter(formatter)
            log.addHandler(file_handler)
    return log
