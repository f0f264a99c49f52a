from werkzeug.serving import ThreadedWSGIServer


class CompanyServer(ThreadedWSGIServer):
    """
    Threaded WSGI server for the company directory app.

    Each request runs on its own thread; the store serializes them.
    Request threads are non-daemonic and joined by server_close(), so once
    shutdown() and server_close() return no request is still touching
    the store.
    """

    daemon_threads = False
    block_on_close = True
