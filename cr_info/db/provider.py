from cr_info.db.core import CatalogClient


ClientSpec = str | None | CatalogClient


def get_client(client_spec: ClientSpec, locale: str | None = None) -> CatalogClient:
    if client_spec is None:
        from cr_info.db.crunchyroll import CrunchyrollClient
        return CrunchyrollClient(locale=locale)

    if isinstance(client_spec, CatalogClient):
        return client_spec

    known_clients = [ 'crunchyroll' ]

    if client_spec not in known_clients:
        raise ValueError(f"{client_spec} not in the list of known catalogs: {known_clients}")

    from cr_info.db.crunchyroll import CrunchyrollClient
    return CrunchyrollClient(locale=locale)
