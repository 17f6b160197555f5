# SPDX-FileCopyrightText: 2020-present Dan Pascu <dan@aethereal.link>
#
# SPDX-License-Identifier: AGPL-3.0-or-later

__version__ = '0.9.0'

__license__ = 'AGPLv3+'
__webpage__ = 'https://github.com/danpascu/loosexml'

__author__ = 'Dan Pascu'
__copyright__ = f'Copyright 2020-present {__author__}'
