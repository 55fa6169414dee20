# This file is part of wslip. See LICENSE file for license information.
