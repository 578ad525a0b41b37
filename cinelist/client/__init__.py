"""
Client core for Cinelist.

Everything a UI drives lives here: the identity/session lifecycle, the local
reconciling cache of the personal watchlist, list detail and join flows, and
the content provider client. All remote calls go through `ApiClient`.
"""
