#!/usr/bin/env python
from ncdav.protocol.tags import TagIdentity


def _d(name: str) -> TagIdentity:
    return TagIdentity("d", name)


# Operations
Propfind = _d("propfind")
PropertyUpdate = _d("propertyupdate")
Mkcol = _d("mkcol")

# Multistatus structure
MultiStatus = _d("multistatus")
Response = _d("response")
Href = _d("href")
PropStat = _d("propstat")
Status = _d("status")
Prop = _d("prop")
Error = _d("error")
SyncToken = _d("sync-token")
## RFC 4918 spells it "responsedescription", some servers add a dash
ResponseDescription = _d("responsedescription")
ResponseDescriptionDashed = _d("response-description")

# Proppatch instructions
Set = _d("set")
Remove = _d("remove")

# Preconditions
CannotModifyProtectedProperty = _d("cannot-modify-protected-property")

# Properties
ResourceType = _d("resourcetype")
Collection = _d("collection")
DisplayName = _d("displayname")
GetEtag = _d("getetag")
GetLastModified = _d("getlastmodified")
GetContentType = _d("getcontenttype")
GetContentLength = _d("getcontentlength")
QuotaUsedBytes = _d("quota-used-bytes")
QuotaAvailableBytes = _d("quota-available-bytes")
CurrentUserPrincipal = _d("current-user-principal")
