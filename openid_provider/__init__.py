#-*-coding: utf-8-*-
"""
This is an implementation of the provider side of the OpenID 2.0
specification in Python.  It establishes associations with relying
parties, turns authentication decisions into signed assertions and
verifies those assertions for relying parties working in stateless mode.

See the :ref:`openid_provider.server` module for the request dispatcher and
the :ref:`openid_provider.login` module for the interface an application
implements to make authentication decisions.

Source code is on GitHub at http://github.com/isagalaev/sm-openid-provider/

(C) 2005-2008 JanRain, Inc., 2012-2014 Rami Chowdhury, and contributors

.. code-block:: none

    Licensed under the Apache License, Version 2.0 (the "License");
    you may not use this file except in compliance with the License.
    You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0

    Unless required by applicable law or agreed to in writing, software
    distributed under the License is distributed on an "AS IS" BASIS,
    WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
    See the License for the specific language governing permissions
    and limitations under the License.
"""

version_info = (0, 1, 0)

__version__ = ".".join(str(x) for x in version_info)

__all__ = [
    'association',
    'cryptutil',
    'extensions',
    'kvform',
    'login',
    'message',
    'realm',
    'responder',
    'server',
    'store',
]
