from prometheus_client import Counter, Info

from dv_exits import _get_project_meta


class Metrics:
    def __init__(self) -> None:
        self.app_version = Info('app_version', 'DV exits version')
        self.accepted_partial_exits = Counter(
            'accepted_partial_exits',
            'Number of verified partial exits accepted for storage',
            labelnames=['network'],
        )
        self.duplicate_partial_exits = Counter(
            'duplicate_partial_exits',
            'Number of resubmitted partial exits skipped as duplicates',
            labelnames=['network'],
        )
        self.recombined_exits = Counter(
            'recombined_exits', 'Number of exits recombined into an aggregate signature'
        )

    def set_app_version(self) -> None:
        self.app_version.info({'version': _get_project_meta()['version']})


metrics = Metrics()
metrics.set_app_version()
