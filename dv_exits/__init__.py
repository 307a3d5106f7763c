from importlib.metadata import PackageNotFoundError, version


def _get_project_meta() -> dict:
    try:
        return {'version': version('dv-exits')}
    except PackageNotFoundError:
        return {'version': 'unknown'}


__version__ = _get_project_meta()['version']
